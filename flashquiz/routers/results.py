"""Router for judging and scoring a finished quiz."""
from typing import AsyncIterator
from fastapi import APIRouter, Depends, HTTPException

from flashquiz import config
from flashquiz.exceptions import DecodingError, MissingResultsError
from flashquiz.schemas import ResultsResponse, ResultItemOut
from flashquiz.services.judging import JudgingClient
from flashquiz.services.quiz_session import view_results

router = APIRouter(prefix="/results", tags=["results"])


async def get_judging_client() -> AsyncIterator[JudgingClient]:
    """FastAPI dependency that provides a judging client."""
    client = JudgingClient()
    try:
        yield client
    finally:
        await client.aclose()


@router.get("/{token}", response_model=ResultsResponse)
async def get_results(token: str, judging_client: JudgingClient = Depends(get_judging_client)):
    """
    Judge every answer in a results token and return the score.

    Also returns a link to the same quiz without answers so it can be
    shared again or retaken.
    """
    try:
        report = await view_results(token, judging_client)
    except DecodingError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MissingResultsError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ResultsResponse(
        title=report.quiz.title,
        instructions=report.quiz.instructions,
        items=[
            ResultItemOut(
                position=item.position,
                card_id=item.card_id,
                question=item.question,
                correct_answer=item.correct_answer,
                user_answer=item.user_answer,
                score=item.judgment.score,
                rationale=item.judgment.rationale
            )
            for item in report.items
        ],
        summary=report.summary,
        retake_path=report.retake.path,
        retake_url=config.PUBLIC_BASE_URL + report.retake.path
    )
