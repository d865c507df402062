import enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Score(str, enum.Enum):
    """Enum for judged answer outcomes."""
    correct = "correct"
    unsure = "unsure"
    incorrect = "incorrect"


class Card(BaseModel):
    """A single flashcard. Unknown keys in decoded tokens are ignored."""
    id: str
    question: str
    answer: str

    model_config = ConfigDict(frozen=True)


class Quiz(BaseModel):
    """
    A shareable quiz. Cards are kept in their original (authored) order.

    When both `user_answers` and `shuffle_order` are set the quiz is a result
    set: `user_answers[p]` is the answer given at presented position p, and
    `shuffle_order[p]` is the index of the card that was shown there.
    """
    title: Optional[str] = None
    instructions: Optional[str] = None
    cards: List[Card] = Field(min_length=1)
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    version: Optional[str] = None
    # Result fields
    user_answers: Optional[List[str]] = Field(default=None, alias="userAnswers")
    shuffle_order: Optional[List[int]] = Field(default=None, alias="shuffleOrder")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="after")
    def check_card_ids(self):
        if len({card.id for card in self.cards}) != len(self.cards):
            raise ValueError("card ids must be unique")
        return self

    @model_validator(mode="after")
    def check_result_fields(self):
        if self.user_answers is None or self.shuffle_order is None:
            return self
        count = len(self.cards)
        if len(self.user_answers) != count or len(self.shuffle_order) != count:
            raise ValueError(
                f"userAnswers and shuffleOrder must both have {count} entries"
            )
        if sorted(self.shuffle_order) != list(range(count)):
            raise ValueError("shuffleOrder is not a permutation of the card indices")
        return self


class Judgment(BaseModel):
    """Outcome of judging one answer."""
    score: Score
    rationale: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)


class ScoreSummary(BaseModel):
    """Aggregate of a list of judgments."""
    percentage: int
    correct: int
    unsure: int
    incorrect: int
    total: int
