"""
Autosave for the quiz editor and the theme preference.

Storage and timers are passed in so the editor can run against a real
key/value store at runtime and a manual clock in tests.
"""
import json
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from flashquiz import config
from flashquiz.models import Card
from flashquiz.services.quiz_session import utc_timestamp

DRAFT_KEY = "flashcard-draft"
THEME_KEY = "flash-theme"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Store that keeps every key in a single JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            print(f"[DRAFT] Could not read {self.path}, starting empty: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)


class DelayedTaskScheduler(Protocol):
    def schedule(self, callback: Callable[[], None], delay: float) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class ThreadingScheduler:
    """Runs callbacks on threading.Timer threads."""

    def schedule(self, callback: Callable[[], None], delay: float) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()


class ManualScheduler:
    """Scheduler driven by advance(); nothing runs until time is moved forward."""

    def __init__(self):
        self.now = 0.0
        self._next_handle = 0
        self._pending: Dict[int, tuple] = {}

    def schedule(self, callback: Callable[[], None], delay: float) -> int:
        self._next_handle += 1
        self._pending[self._next_handle] = (self.now + delay, callback)
        return self._next_handle

    def cancel(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def advance(self, seconds: float) -> None:
        """Move time forward, running every callback that comes due in order."""
        target = self.now + seconds
        while True:
            due = [(at, handle) for handle, (at, _) in self._pending.items() if at <= target]
            if not due:
                break
            at, handle = min(due)
            _, callback = self._pending.pop(handle)
            self.now = at
            callback()
        self.now = target


class Draft(BaseModel):
    """Unsaved editor state."""
    cards: List[Card] = Field(default_factory=list)
    title: str = ""
    instructions: str = ""
    last_saved: Optional[str] = Field(default=None, alias="lastSaved")

    model_config = ConfigDict(populate_by_name=True)

    def is_blank(self) -> bool:
        has_card_text = any(card.question.strip() or card.answer.strip() for card in self.cards)
        return not (has_card_text or self.title.strip() or self.instructions.strip())


class DraftManager:
    """
    Debounced draft autosave.

    Each queue_save() call replaces the pending draft and restarts the quiet
    period; only the last draft is written. Blank drafts are never written.
    """

    def __init__(
        self,
        store: KeyValueStore,
        scheduler: DelayedTaskScheduler,
        delay: Optional[float] = None,
        clock: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.delay = config.DRAFT_SAVE_DELAY_SECONDS if delay is None else delay
        self.clock = clock or utc_timestamp
        self._pending_draft: Optional[Draft] = None
        self._handle: Any = None
        self._lock = threading.Lock()

    def load(self) -> Optional[Draft]:
        """Read the saved draft. A corrupt draft is deleted and treated as missing."""
        raw = self.store.get(DRAFT_KEY)
        if raw is None:
            return None
        try:
            return Draft.model_validate_json(raw)
        except ValidationError as e:
            print(f"[DRAFT] Discarding unreadable draft: {e.error_count()} error(s)")
            self.store.delete(DRAFT_KEY)
            return None

    def queue_save(
        self,
        cards: Sequence[Union[Card, Dict[str, Any]]],
        title: str = "",
        instructions: str = "",
    ) -> None:
        draft = Draft(
            cards=[c if isinstance(c, Card) else Card.model_validate(c) for c in cards],
            title=title or "",
            instructions=instructions or "",
        )
        with self._lock:
            if self._handle is not None:
                self.scheduler.cancel(self._handle)
            self._pending_draft = draft
            self._handle = self.scheduler.schedule(self.flush, self.delay)

    @property
    def has_pending(self) -> bool:
        return self._pending_draft is not None

    def flush(self) -> bool:
        """
        Write the pending draft now.

        Returns:
            True if a draft was written
        """
        with self._lock:
            draft = self._pending_draft
            if self._handle is not None:
                self.scheduler.cancel(self._handle)
            self._pending_draft = None
            self._handle = None

        if draft is None or draft.is_blank():
            return False

        draft = draft.model_copy(update={"last_saved": self.clock()})
        self.store.set(DRAFT_KEY, draft.model_dump_json(by_alias=True))
        print(f"[DRAFT] Saved draft with {len(draft.cards)} cards")
        return True

    def clear(self) -> None:
        with self._lock:
            if self._handle is not None:
                self.scheduler.cancel(self._handle)
            self._pending_draft = None
            self._handle = None
        self.store.delete(DRAFT_KEY)


class ThemePreference:
    """Theme identifier kept next to the draft in the same store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> str:
        return self.store.get(THEME_KEY) or ""

    def set(self, theme: str) -> None:
        self.store.set(THEME_KEY, theme)
