"""Router for the editor's autosaved draft and theme preference."""
from typing import Optional
from fastapi import APIRouter, Depends

from flashquiz import config
from flashquiz.schemas import DraftIn, DraftSaveResponse, ThemeBody
from flashquiz.services.drafts import (
    Draft, DraftManager, JsonFileStore, ThemePreference, ThreadingScheduler
)

router = APIRouter(tags=["drafts"])

_store: Optional[JsonFileStore] = None
_draft_manager: Optional[DraftManager] = None


def get_store() -> JsonFileStore:
    """FastAPI dependency that provides the shared state file store."""
    global _store
    if _store is None:
        print(f"[DRAFT] Using state file {config.STATE_FILE_PATH}")
        _store = JsonFileStore(config.STATE_FILE_PATH)
    return _store


def get_draft_manager() -> DraftManager:
    """FastAPI dependency that provides the draft autosaver (one editor session)."""
    global _draft_manager
    if _draft_manager is None:
        _draft_manager = DraftManager(get_store(), ThreadingScheduler())
    return _draft_manager


def flush_pending_draft() -> None:
    """Write any draft still waiting for its quiet period."""
    if _draft_manager is not None:
        _draft_manager.flush()


def get_theme_preference(store: JsonFileStore = Depends(get_store)) -> ThemePreference:
    return ThemePreference(store)


@router.get("/draft", response_model=Optional[Draft])
def load_draft(manager: DraftManager = Depends(get_draft_manager)):
    """
    Get the saved editor draft.

    Returns null if there is none. An unreadable draft is discarded.
    """
    return manager.load()


@router.put("/draft", response_model=DraftSaveResponse)
def save_draft(draft: DraftIn, manager: DraftManager = Depends(get_draft_manager)):
    """Queue the editor contents for saving once edits go quiet."""
    manager.queue_save(draft.cards, draft.title, draft.instructions)
    return DraftSaveResponse(saved=False, pending=manager.has_pending)


@router.post("/draft/flush", response_model=DraftSaveResponse)
def flush_draft(manager: DraftManager = Depends(get_draft_manager)):
    """Save the queued draft now instead of waiting."""
    saved = manager.flush()
    return DraftSaveResponse(saved=saved, pending=manager.has_pending)


@router.delete("/draft")
def delete_draft(manager: DraftManager = Depends(get_draft_manager)):
    """Drop the saved draft and anything still queued."""
    manager.clear()
    return {"message": "Draft cleared"}


@router.get("/theme", response_model=ThemeBody)
def get_theme(theme: ThemePreference = Depends(get_theme_preference)):
    return ThemeBody(theme=theme.get())


@router.put("/theme", response_model=ThemeBody)
def set_theme(body: ThemeBody, theme: ThemePreference = Depends(get_theme_preference)):
    theme.set(body.theme)
    return ThemeBody(theme=theme.get())
