"""
Quiz token codec.

A token is the quiz serialized as compact JSON, base64 encoded, with the
URL-unsafe characters swapped for `-`/`_` and the `=` padding stripped.
Tokens carry the whole quiz; nothing is stored server side.
"""
import base64
import binascii
import json
from typing import Any, Mapping, Union
from urllib.parse import unquote, urlsplit

from pydantic import ValidationError

from flashquiz.exceptions import (
    EncodingError, MalformedTokenError, InvalidQuizError, EmptyQuizError
)
from flashquiz.models import Quiz

QUIZ_PATH_PREFIX = "/quiz/"
RESULTS_PATH_PREFIX = "/results/"


def _to_json(quiz: Union[Quiz, Mapping[str, Any]]) -> str:
    if isinstance(quiz, Quiz):
        payload = quiz.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        payload = quiz
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def encode_quiz(quiz: Union[Quiz, Mapping[str, Any]]) -> str:
    """
    Encode quiz data to a URL-safe base64 string.

    Raises:
        EncodingError: if the data cannot be serialized to JSON
    """
    try:
        raw = _to_json(quiz).encode("utf-8")
    except (TypeError, ValueError) as e:
        # UnicodeEncodeError (lone surrogates) is a ValueError
        raise EncodingError(f"Failed to encode quiz data: {e}") from e

    encoded = base64.b64encode(raw).decode("ascii")
    return encoded.replace("+", "-").replace("/", "_").rstrip("=")


def decode_quiz(token: str) -> Quiz:
    """
    Decode a URL-safe base64 string back to a validated Quiz.

    Tokens that went through the standard base64 alphabet (`+`, `/`, with or
    without padding) are accepted too.

    Raises:
        MalformedTokenError: token is not reversible to a JSON object
        EmptyQuizError: the quiz has no cards
        InvalidQuizError: the JSON does not match the quiz schema
    """
    if not isinstance(token, str) or not token.strip():
        raise MalformedTokenError("Failed to decode quiz data: empty token")

    base64_string = token.strip().rstrip("=").replace("-", "+").replace("_", "/")
    base64_string += "=" * (-len(base64_string) % 4)

    try:
        raw = base64.b64decode(base64_string, validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        raise MalformedTokenError(f"Failed to decode quiz data: {e}") from e

    if not isinstance(data, dict):
        raise MalformedTokenError("Failed to decode quiz data: Invalid quiz data structure")

    cards = data.get("cards")
    if not isinstance(cards, list) or len(cards) == 0:
        raise EmptyQuizError("Failed to decode quiz data: No valid cards found in quiz data")

    try:
        return Quiz.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'quiz'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidQuizError(f"Failed to decode quiz data: {problems}") from e


def extract_token(raw: str) -> str:
    """
    Pull the bare token out of whatever the caller was handed.

    Accepts a bare token, a path or full URL ending in the token (query string
    and fragment are ignored), or a percent-encoded token.
    """
    value = (raw or "").strip()
    if "/" in value or "?" in value or "#" in value:
        value = urlsplit(value).path
    value = value.rstrip("/")
    if "/" in value:
        value = value.rsplit("/", 1)[1]
    return unquote(value).strip()


def decode_from_path(raw: str) -> Quiz:
    """Decode a token that may still be wrapped in a URL or path."""
    return decode_quiz(extract_token(raw))


def has_results(quiz: Quiz) -> bool:
    """Check whether quiz data carries both answers and a shuffle order."""
    return quiz.user_answers is not None and quiz.shuffle_order is not None


def clean_quiz(quiz: Quiz) -> Quiz:
    """Copy of the quiz without any result fields."""
    return quiz.model_copy(update={"user_answers": None, "shuffle_order": None})


def generate_quiz_path(quiz: Quiz, base_url: str = "") -> str:
    """Generate a shareable quiz URL (without results)."""
    return f"{base_url.rstrip('/')}{QUIZ_PATH_PREFIX}{encode_quiz(clean_quiz(quiz))}"


def generate_results_path(quiz: Quiz, base_url: str = "") -> str:
    """Generate a results URL (with user answers)."""
    return f"{base_url.rstrip('/')}{RESULTS_PATH_PREFIX}{encode_quiz(quiz)}"
