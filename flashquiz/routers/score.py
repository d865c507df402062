"""Router for AI judging of a single flashcard answer."""
import traceback
from fastapi import APIRouter, HTTPException

from flashquiz.exceptions import JudgeUnavailableError
from flashquiz.schemas import ScoreRequest, ScoreResponse
from flashquiz.services.llm import judge_answer_with_llm, exact_match_judgment

router = APIRouter(tags=["scoring"])


@router.post("/score-quiz", response_model=ScoreResponse)
def score_quiz(request: ScoreRequest):
    """
    Judge one answer as correct, unsure or incorrect.

    Returns 400 if any field is missing or blank. If the AI judge fails for
    any reason the answer is exact-matched instead and 200 is still returned.
    """
    if not request.question or not request.correct_answer or not request.user_answer:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: question, correctAnswer, userAnswer"
        )

    try:
        judgment = judge_answer_with_llm(
            request.question,
            request.correct_answer,
            request.user_answer
        )
    except JudgeUnavailableError as e:
        print(f"[SCORE] AI scoring unavailable: {e}")
        judgment = exact_match_judgment(request.correct_answer, request.user_answer)
    except Exception as e:
        print(f"[SCORE ERROR] Unexpected error while scoring: {e}")
        traceback.print_exc()
        judgment = exact_match_judgment(request.correct_answer, request.user_answer)

    return ScoreResponse(score=judgment.score, rationale=judgment.rationale)
