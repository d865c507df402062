"""
Quiz pipeline tests
Covers the token codec, the shuffle engine and the score aggregator.
"""
import base64
import json
import random

import pytest

from flashquiz.exceptions import (
    DecodingError, EncodingError, EmptyQuizError, InvalidQuizError, MalformedTokenError
)
from flashquiz.models import Card, Judgment, Quiz, Score
from flashquiz.services.encoding import (
    encode_quiz, decode_quiz, decode_from_path, extract_token, has_results,
    clean_quiz, generate_quiz_path, generate_results_path,
)
from flashquiz.services.shuffle import shuffle_cards, restore_card_order, is_permutation
from flashquiz.services.scoring import calculate_percentage, summarize_judgments


def make_cards(n):
    return [Card(id=str(i), question=f"Question {i}?", answer=f"Answer {i}") for i in range(n)]


def make_quiz(n=3, **kwargs):
    return Quiz(cards=make_cards(n), **kwargs)


def judgments(*scores):
    return [Judgment(score=s, rationale="test") for s in scores]


# ---------------------------------------------------------------- codec

@pytest.mark.parametrize("quiz", [
    make_quiz(1),
    make_quiz(5, title="French Vocabulary", instructions="Answer in French"),
    make_quiz(2, title="", instructions="", created_at="2024-05-01T10:00:00.000Z", version="1.0"),
    Quiz(cards=[Card(id="a", question="Où est la gare? 🚉", answer="là-bas ÿ")], title="Ünïcödé"),
])
def test_round_trip(quiz):
    """Decoding an encoded quiz gives back the same quiz."""
    assert decode_quiz(encode_quiz(quiz)) == quiz


def test_round_trip_with_results():
    quiz = make_quiz(3, title="Capitals").model_copy(update={
        "user_answers": ["b", "c", "a"],
        "shuffle_order": [1, 2, 0],
    })
    decoded = decode_quiz(encode_quiz(quiz))
    assert decoded == quiz
    assert has_results(decoded)
    assert decoded.shuffle_order == [1, 2, 0]


def test_token_is_url_safe_and_unpadded():
    # Long enough text to produce + and / in standard base64
    quiz = Quiz(cards=[Card(id="1", question="???>>>~~~" * 20, answer="ÿÿÿ" * 20)])
    token = encode_quiz(quiz)
    assert "+" not in token and "/" not in token and "=" not in token
    assert set(token) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")


def test_encode_is_deterministic_and_uses_wire_names():
    quiz = make_quiz(2, created_at="2024-01-01T00:00:00Z")
    assert encode_quiz(quiz) == encode_quiz(quiz)

    token = encode_quiz(quiz)
    padded = token.replace("-", "+").replace("_", "/") + "=" * (-len(token) % 4)
    payload = json.loads(base64.b64decode(padded))
    assert payload["createdAt"] == "2024-01-01T00:00:00Z"
    assert "title" not in payload
    assert "userAnswers" not in payload


def test_encode_plain_mapping():
    data = {"cards": [{"id": "1", "question": "Q", "answer": "A"}], "title": "T"}
    assert decode_quiz(encode_quiz(data)).title == "T"


def test_encode_rejects_circular_data():
    data = {"cards": []}
    data["cards"].append(data)
    with pytest.raises(EncodingError):
        encode_quiz(data)


def test_encode_rejects_text_that_is_not_utf8():
    quiz = Quiz(cards=[Card(id="1", question="Q \ud800", answer="A")])
    with pytest.raises(EncodingError, match="Failed to encode quiz data"):
        encode_quiz(quiz)


def test_decode_accepts_standard_base64_alphabet():
    quiz = Quiz(cards=[Card(id="1", question="???>>>" * 10, answer="ÿ" * 10)])
    standard = base64.b64encode(
        json.dumps(quiz.model_dump(by_alias=True, exclude_none=True)).encode("utf-8")
    ).decode("ascii")
    assert decode_quiz(standard) == quiz
    assert decode_quiz(f"  {standard}\n") == quiz


def test_decode_errors_are_distinguishable():
    empty = base64.urlsafe_b64encode(b'{"cards": []}').decode().rstrip("=")
    missing = base64.urlsafe_b64encode(b'{"title": "x"}').decode().rstrip("=")
    bad_card = base64.urlsafe_b64encode(b'{"cards": [{"id": 1}]}').decode().rstrip("=")
    not_json = base64.urlsafe_b64encode(b"not json at all").decode().rstrip("=")

    with pytest.raises(EmptyQuizError):
        decode_quiz(empty)
    with pytest.raises(EmptyQuizError):
        decode_quiz(missing)
    with pytest.raises(InvalidQuizError):
        decode_quiz(bad_card)
    with pytest.raises(MalformedTokenError):
        decode_quiz(not_json)
    with pytest.raises(MalformedTokenError):
        decode_quiz("!!!not-base64!!!")
    with pytest.raises(MalformedTokenError):
        decode_quiz("")


def test_decode_error_carries_cause():
    with pytest.raises(DecodingError) as exc_info:
        decode_quiz(base64.urlsafe_b64encode(b'{"cards": []}').decode())
    assert "No valid cards found" in str(exc_info.value)


def test_decode_rejects_inconsistent_results():
    data = {
        "cards": [{"id": "1", "question": "Q", "answer": "A"}, {"id": "2", "question": "Q", "answer": "A"}],
        "userAnswers": ["a", "b"],
        "shuffleOrder": [0, 0],
    }
    with pytest.raises(InvalidQuizError):
        decode_quiz(encode_quiz(data))


def test_decode_rejects_duplicate_card_ids():
    data = {
        "cards": [{"id": "1", "question": "Q1", "answer": "A1"}, {"id": "1", "question": "Q2", "answer": "A2"}],
    }
    with pytest.raises(InvalidQuizError, match="card ids must be unique"):
        decode_quiz(encode_quiz(data))


def test_quiz_model_rejects_duplicate_card_ids():
    with pytest.raises(ValueError):
        Quiz(cards=[Card(id="x", question="Q1", answer="A1"), Card(id="x", question="Q2", answer="A2")])


def test_partial_results_are_not_results():
    data = make_quiz(2).model_dump(by_alias=True, exclude_none=True)
    data["userAnswers"] = ["a", "b"]
    decoded = decode_quiz(encode_quiz(data))
    assert not has_results(decoded)


def test_extract_token_from_envelopes():
    token = encode_quiz(make_quiz(2))
    assert extract_token(token) == token
    assert extract_token(f"/quiz/{token}") == token
    assert extract_token(f"https://example.com/results/{token}/") == token
    assert extract_token(f"https://example.com/quiz/{token}?ref=mail#top") == token
    assert extract_token(token[:4] + "%2D" + token[4:]) == token[:4] + "-" + token[4:]
    assert decode_from_path(f"http://localhost:3000/quiz/{token}") == make_quiz(2)


def test_generated_paths():
    quiz = make_quiz(2).model_copy(update={"user_answers": ["x", "y"], "shuffle_order": [1, 0]})

    quiz_path = generate_quiz_path(quiz, "https://flash.example/")
    assert quiz_path.startswith("https://flash.example/quiz/")
    assert not has_results(decode_from_path(quiz_path))

    results_path = generate_results_path(quiz)
    assert results_path.startswith("/results/")
    assert decode_from_path(results_path) == quiz
    assert clean_quiz(quiz) == make_quiz(2)


# ---------------------------------------------------------------- shuffle

@pytest.mark.parametrize("n", [0, 1, 2, 7, 30])
def test_shuffle_is_permutation(n):
    cards = make_cards(n)
    presented, order = shuffle_cards(cards, random.Random(n))
    assert is_permutation(order, n)
    assert all(presented[p] == cards[order[p]] for p in range(n))
    assert restore_card_order(presented, order) == cards


def test_shuffle_small_decks_are_identity():
    assert shuffle_cards([]) == ([], [])
    card = make_cards(1)
    assert shuffle_cards(card) == (card, [0])


def test_shuffle_produces_every_order():
    cards = make_cards(3)
    seen = {tuple(shuffle_cards(cards, random.Random(seed))[1]) for seed in range(300)}
    assert len(seen) == 6


def test_restore_rejects_bad_order():
    with pytest.raises(ValueError):
        restore_card_order(make_cards(2), [0, 0])
    with pytest.raises(ValueError):
        restore_card_order(make_cards(2), [0])


# ---------------------------------------------------------------- scoring

def test_percentage_mixed():
    assert calculate_percentage(judgments(Score.correct, Score.unsure, Score.incorrect)) == 50


def test_percentage_all_correct():
    assert calculate_percentage(judgments(Score.correct, Score.correct)) == 100


def test_percentage_empty():
    assert calculate_percentage([]) == 0
    summary = summarize_judgments([])
    assert summary.percentage == 0 and summary.total == 0


def test_percentage_rounds_half_up():
    # 0.5 / 4 = 12.5%
    assert calculate_percentage(judgments(Score.unsure, Score.incorrect, Score.incorrect, Score.incorrect)) == 13
    # 1 / 3 = 33.3%, 2 / 3 = 66.7%
    assert calculate_percentage(judgments(Score.correct, Score.incorrect, Score.incorrect)) == 33
    assert calculate_percentage(judgments(Score.correct, Score.correct, Score.incorrect)) == 67


def test_summary_counts():
    summary = summarize_judgments(judgments(
        Score.correct, Score.unsure, Score.unsure, Score.incorrect, Score.correct
    ))
    assert (summary.correct, summary.unsure, summary.incorrect, summary.total) == (2, 2, 1, 5)
    assert summary.percentage == 60
