from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from flashquiz.models import Card, Score, ScoreSummary


class ScoreRequest(BaseModel):
    """Schema for the answer-judging request. Fields are checked by the route."""
    question: Optional[str] = None
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    user_answer: Optional[str] = Field(default=None, alias="userAnswer")

    model_config = ConfigDict(populate_by_name=True)


class ScoreResponse(BaseModel):
    """Schema for the answer-judging response."""
    score: Score
    rationale: str


class ShareRequest(BaseModel):
    """Schema for turning editor contents into a quiz link."""
    cards: List[Card]
    title: Optional[str] = None
    instructions: Optional[str] = None


class LinkResponse(BaseModel):
    token: str
    path: str
    url: str


class PresentedCard(BaseModel):
    """A card as shown to the respondent (no answer)."""
    id: str
    question: str


class TakeQuizResponse(BaseModel):
    title: Optional[str] = None
    instructions: Optional[str] = None
    cards: List[PresentedCard]
    shuffle_order: List[int] = Field(alias="shuffleOrder")
    total: int

    model_config = ConfigDict(populate_by_name=True)


class SubmitAnswersRequest(BaseModel):
    """Answers in the order the cards were presented."""
    shuffle_order: List[int] = Field(alias="shuffleOrder")
    answers: List[str]

    model_config = ConfigDict(populate_by_name=True)


class ResultItemOut(BaseModel):
    position: int
    card_id: str = Field(alias="cardId")
    question: str
    correct_answer: str = Field(alias="correctAnswer")
    user_answer: str = Field(alias="userAnswer")
    score: Score
    rationale: str

    model_config = ConfigDict(populate_by_name=True)


class ResultsResponse(BaseModel):
    title: Optional[str] = None
    instructions: Optional[str] = None
    items: List[ResultItemOut]
    summary: ScoreSummary
    retake_path: str = Field(alias="retakePath")
    retake_url: str = Field(alias="retakeUrl")

    model_config = ConfigDict(populate_by_name=True)


class DeckExportRequest(BaseModel):
    cards: List[Card]
    title: str = ""
    instructions: str = ""


class DeckCode(BaseModel):
    code: str


class DeckImportResponse(BaseModel):
    cards: List[Card]
    title: str
    instructions: str


class DraftIn(BaseModel):
    """Current editor contents, sent on every edit."""
    cards: List[Card] = []
    title: str = ""
    instructions: str = ""


class DraftSaveResponse(BaseModel):
    saved: bool
    pending: bool


class ThemeBody(BaseModel):
    theme: str
