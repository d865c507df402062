"""
Deck codes: a plain base64 copy of the editor contents that can be pasted
back into another editor. Unlike quiz tokens these keep blank-answer cards
and are not meant to go in a URL.
"""
import base64
import binascii
import json
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from flashquiz.exceptions import DeckImportError, EncodingError, QuizValidationError
from flashquiz.models import Card
from flashquiz.services.quiz_session import QUIZ_VERSION, utc_timestamp


class DeckData(BaseModel):
    cards: List[Card]
    title: str = ""
    instructions: str = ""


def export_deck(
    cards: Sequence[Union[Card, Dict[str, Any]]],
    title: str = "",
    instructions: str = "",
    now: Optional[str] = None,
) -> str:
    """
    Export editor contents as a base64 deck code.

    Cards are kept if they have a question or an answer.

    Raises:
        QuizValidationError: if there is nothing to export
        EncodingError: if the text cannot be encoded as UTF-8
    """
    parsed = [c if isinstance(c, Card) else Card.model_validate(c) for c in cards]
    valid_cards = [c for c in parsed if c.question.strip() or c.answer.strip()]
    if not valid_cards and not title.strip() and not instructions.strip():
        raise QuizValidationError("No data to export")

    export_data = {
        "title": title or "Untitled Quiz",
        "instructions": instructions or "",
        "cards": [c.model_dump() for c in valid_cards],
        "createdAt": now or utc_timestamp(),
        "version": QUIZ_VERSION,
    }
    try:
        raw = json.dumps(export_data, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Failed to export deck: {e}") from e
    return base64.b64encode(raw).decode("ascii")


def _try_base64(text: str) -> Optional[str]:
    candidate = text.strip().rstrip("=").replace("-", "+").replace("_", "/")
    candidate += "=" * (-len(candidate) % 4)
    try:
        return base64.b64decode(candidate, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None


def import_deck(text: str) -> DeckData:
    """
    Import a deck code. Both base64 codes and raw JSON are accepted.

    Raises:
        DeckImportError: if the text is not a deck
    """
    if not text or not text.strip():
        raise DeckImportError("Incorrect data format")

    # Try base64 first, then assume it's already JSON
    json_string = _try_base64(text) or text

    try:
        data = json.loads(json_string)
    except ValueError as e:
        raise DeckImportError("Incorrect data format") from e

    if not isinstance(data, dict) or not isinstance(data.get("cards"), list):
        raise DeckImportError("Incorrect data format")

    try:
        return DeckData(
            cards=data["cards"],
            title=data.get("title") or "",
            instructions=data.get("instructions") or "",
        )
    except ValidationError as e:
        raise DeckImportError("Incorrect data format") from e
