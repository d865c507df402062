"""Router for taking a shared quiz."""
from fastapi import APIRouter, HTTPException

from flashquiz import config
from flashquiz.exceptions import DecodingError, EncodingError, QuizValidationError
from flashquiz.schemas import (
    TakeQuizResponse, PresentedCard, SubmitAnswersRequest, LinkResponse
)
from flashquiz.services.encoding import decode_quiz, encode_quiz, generate_results_path
from flashquiz.services.quiz_session import QuizAttempt, build_results_quiz

router = APIRouter(prefix="/quiz", tags=["quiz"])


@router.get("/{token}", response_model=TakeQuizResponse)
def take_quiz(token: str):
    """
    Start a quiz attempt.

    Cards come back shuffled and without answers. The shuffle order has to be
    sent back with the answers so results can be matched to the right cards.
    A new order is drawn on every request, so a retake is just another GET.
    """
    try:
        attempt = QuizAttempt.from_token(token)
    except DecodingError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return TakeQuizResponse(
        title=attempt.quiz.title,
        instructions=attempt.quiz.instructions,
        cards=[PresentedCard(id=card.id, question=card.question) for card in attempt.presented_cards],
        shuffle_order=attempt.shuffle_order,
        total=attempt.total
    )


@router.post("/{token}/submit", response_model=LinkResponse)
def submit_answers(token: str, request: SubmitAnswersRequest):
    """Attach a finished attempt to the quiz and return the /results/ link."""
    try:
        quiz = decode_quiz(token)
        results = build_results_quiz(quiz, request.shuffle_order, request.answers)
        results_token = encode_quiz(results)
        path = generate_results_path(results)
    except (DecodingError, QuizValidationError, EncodingError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return LinkResponse(
        token=results_token,
        path=path,
        url=config.PUBLIC_BASE_URL + path
    )
