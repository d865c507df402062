"""
Quiz workflows: build and share a quiz, take it one card at a time, and
judge a finished attempt.
"""
import random
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from flashquiz.exceptions import MissingResultsError, QuizValidationError
from flashquiz.models import Card, Judgment, Quiz, ScoreSummary
from flashquiz.services.encoding import (
    decode_from_path, encode_quiz, clean_quiz, has_results,
    generate_quiz_path, generate_results_path,
)
from flashquiz.services.judging import JudgingClient
from flashquiz.services.scoring import summarize_judgments
from flashquiz.services.shuffle import shuffle_cards

QUIZ_VERSION = "1.0"

CardInput = Union[Card, Mapping[str, Any]]


class SharedLink(BaseModel):
    """An encoded token and the path that carries it."""
    token: str
    path: str


class ResultItem(BaseModel):
    """One judged answer, in the order the respondent saw the cards."""
    position: int
    card_index: int
    card_id: str
    question: str
    correct_answer: str
    user_answer: str
    judgment: Judgment


class ResultsReport(BaseModel):
    quiz: Quiz
    items: List[ResultItem]
    summary: ScoreSummary
    retake: SharedLink


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_quiz(
    cards: Sequence[CardInput],
    title: Optional[str] = "",
    instructions: Optional[str] = "",
    created_at: Optional[str] = None,
    version: Optional[str] = QUIZ_VERSION,
) -> Quiz:
    """
    Build a quiz from editor state.

    Cards with a blank question or answer are dropped. Blank title and
    instructions are left out.

    Raises:
        QuizValidationError: if no complete card remains
        QuizValidationError: if two cards share an id
    """
    valid_cards = []
    for card in cards:
        card = card if isinstance(card, Card) else Card.model_validate(card)
        if card.question.strip() and card.answer.strip():
            valid_cards.append(card)

    if not valid_cards:
        raise QuizValidationError("Add some cards first!")

    ids = [card.id for card in valid_cards]
    if len(set(ids)) != len(ids):
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        raise QuizValidationError(f"Duplicate card ids: {', '.join(duplicates)}")

    return Quiz(
        title=title or None,
        instructions=instructions or None,
        cards=valid_cards,
        created_at=created_at or utc_timestamp(),
        version=version,
    )


def share_quiz(quiz: Quiz, base_url: str = "") -> SharedLink:
    """Encode the quiz without results and build its /quiz/ link."""
    return SharedLink(
        token=encode_quiz(clean_quiz(quiz)),
        path=generate_quiz_path(quiz, base_url)
    )


class QuizAttempt:
    """
    One run through a quiz. Cards are shown in a shuffled order; answers are
    collected in that presented order.
    """

    def __init__(self, quiz: Quiz, rng: Optional[random.Random] = None):
        self.quiz = clean_quiz(quiz)
        self._rng = rng
        self._shuffle()

    @classmethod
    def from_token(cls, raw: str, rng: Optional[random.Random] = None) -> "QuizAttempt":
        """
        Start an attempt from a quiz token, path or URL.

        Raises:
            DecodingError: if the token is corrupt or has no cards
        """
        return cls(decode_from_path(raw), rng=rng)

    def _shuffle(self) -> None:
        self.presented_cards, self.shuffle_order = shuffle_cards(self.quiz.cards, self._rng)
        self.answers: List[str] = []

    @property
    def total(self) -> int:
        return len(self.presented_cards)

    @property
    def position(self) -> int:
        return len(self.answers)

    @property
    def is_complete(self) -> bool:
        return self.position >= self.total

    @property
    def current_card(self) -> Optional[Card]:
        if self.is_complete:
            return None
        return self.presented_cards[self.position]

    def submit_answer(self, answer: str) -> None:
        """
        Record the answer for the current card and move on.

        Raises:
            QuizValidationError: blank answer, or the quiz is already finished
        """
        if self.is_complete:
            raise QuizValidationError("Quiz is already complete")
        if not answer or not answer.strip():
            raise QuizValidationError("Please enter an answer before continuing.")
        self.answers.append(answer.strip())

    def retake(self) -> None:
        """Throw away answers and reshuffle."""
        self._shuffle()

    def build_results(self) -> Quiz:
        if not self.is_complete:
            raise QuizValidationError(
                f"Quiz is not finished ({self.position} of {self.total} answered)"
            )
        return self.quiz.model_copy(update={
            "user_answers": list(self.answers),
            "shuffle_order": list(self.shuffle_order),
        })

    def results_link(self, base_url: str = "") -> SharedLink:
        results = self.build_results()
        return SharedLink(
            token=encode_quiz(results),
            path=generate_results_path(results, base_url)
        )


def build_results_quiz(quiz: Quiz, shuffle_order: Sequence[int], answers: Sequence[str]) -> Quiz:
    """
    Attach a finished attempt to a quiz.

    Raises:
        QuizValidationError: wrong number of answers, a blank answer, or an
            order that is not a permutation of the cards
    """
    count = len(quiz.cards)
    if len(answers) != count or len(shuffle_order) != count:
        raise QuizValidationError(f"Expected {count} answers and a {count}-card shuffle order")
    if any(not answer or not answer.strip() for answer in answers):
        raise QuizValidationError("Please enter an answer before continuing.")
    if sorted(shuffle_order) != list(range(count)):
        raise QuizValidationError("shuffleOrder is not a permutation of the card indices")

    return clean_quiz(quiz).model_copy(update={
        "user_answers": [answer.strip() for answer in answers],
        "shuffle_order": list(shuffle_order),
    })


async def view_results(raw: str, judging_client: JudgingClient, base_url: str = "") -> ResultsReport:
    """
    Decode a results token, judge every answer and score the attempt.

    All answers are judged concurrently and nothing is returned until every
    judgment (or its fallback) is in.

    Raises:
        DecodingError: if the token is corrupt or has no cards
        MissingResultsError: if the token has no answers attached
    """
    quiz = decode_from_path(raw)
    if not has_results(quiz):
        raise MissingResultsError("No results found in quiz data")

    pairs = []
    for position, user_answer in enumerate(quiz.user_answers):
        card_index = quiz.shuffle_order[position]
        pairs.append((position, card_index, quiz.cards[card_index], user_answer))

    print(f"[QUIZ] Judging {len(pairs)} answers")
    judgments = await judging_client.judge_all(
        (card.question, card.answer, user_answer) for _, _, card, user_answer in pairs
    )

    items = [
        ResultItem(
            position=position,
            card_index=card_index,
            card_id=card.id,
            question=card.question,
            correct_answer=card.answer,
            user_answer=user_answer,
            judgment=judgment,
        )
        for (position, card_index, card, user_answer), judgment in zip(pairs, judgments)
    ]

    summary = summarize_judgments(judgments)
    print(f"[QUIZ] Scored {summary.percentage}% ({summary.correct} correct, "
          f"{summary.unsure} unsure, {summary.incorrect} incorrect)")

    return ResultsReport(
        quiz=quiz,
        items=items,
        summary=summary,
        retake=share_quiz(quiz, base_url),
    )
