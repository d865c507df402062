"""Router for sharing quizzes and moving decks between editors."""
from fastapi import APIRouter, HTTPException

from flashquiz import config
from flashquiz.exceptions import DeckImportError, EncodingError, QuizValidationError
from flashquiz.schemas import (
    ShareRequest, LinkResponse, DeckExportRequest, DeckCode, DeckImportResponse
)
from flashquiz.services.deck_io import export_deck, import_deck
from flashquiz.services.quiz_session import build_quiz, share_quiz

router = APIRouter(tags=["editor"])


@router.post("/quiz/share", response_model=LinkResponse)
def share(request: ShareRequest):
    """
    Turn editor contents into a shareable /quiz/ link.

    Cards with a blank question or answer are left out.
    """
    try:
        quiz = build_quiz(request.cards, request.title, request.instructions)
        link = share_quiz(quiz)
    except (QuizValidationError, EncodingError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    print(f"[QUIZ] Shared quiz with {len(quiz.cards)} cards")
    return LinkResponse(token=link.token, path=link.path, url=config.PUBLIC_BASE_URL + link.path)


@router.post("/deck/export", response_model=DeckCode)
def deck_export(request: DeckExportRequest):
    """Export editor contents as a deck code."""
    try:
        code = export_deck(request.cards, request.title, request.instructions)
    except (QuizValidationError, EncodingError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return DeckCode(code=code)


@router.post("/deck/import", response_model=DeckImportResponse)
def deck_import(request: DeckCode):
    """Load a pasted deck code (base64 or raw JSON) back into the editor."""
    try:
        deck = import_deck(request.code)
    except DeckImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return DeckImportResponse(cards=deck.cards, title=deck.title, instructions=deck.instructions)
