"""
Client for the answer-judging endpoint.

Every answer is judged with a single POST. Anything other than a valid
judgment coming back (error status, timeout, transport error, junk body) is
treated the same way: the answer is exact-matched locally instead. No retries.
"""
import asyncio
from typing import Any, Iterable, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from flashquiz import config
from flashquiz.exceptions import JudgeUnavailableError
from flashquiz.models import Judgment
from flashquiz.services.llm import exact_match_judgment


class JudgingClient:
    def __init__(
        self,
        judge_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.judge_url = judge_url or config.JUDGE_URL
        self.timeout = timeout if timeout is not None else config.JUDGE_TIMEOUT_SECONDS
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def _request_judgment(self, question: str, correct_answer: str, user_answer: str) -> Judgment:
        payload = {
            "question": question,
            "correctAnswer": correct_answer,
            "userAnswer": user_answer,
        }
        try:
            r = await self._client.post(self.judge_url, json=payload)
            r.raise_for_status()
        except httpx.HTTPStatusError as http_err:
            raise JudgeUnavailableError(
                f"Judge returned {http_err.response.status_code}: {http_err.response.text}"
            ) from http_err
        except httpx.RequestError as net_err:
            raise JudgeUnavailableError(f"Judge request failed: {net_err!r}") from net_err

        try:
            return Judgment.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            raise JudgeUnavailableError(f"Unexpected judge response: {r.text}") from e

    async def judge(self, question: str, correct_answer: str, user_answer: str) -> Judgment:
        """
        Judge one answer, falling back to exact text matching when the judge
        is unavailable. Never raises for judge failures.
        """
        try:
            return await self._request_judgment(question, correct_answer, user_answer)
        except JudgeUnavailableError as e:
            print(f"[JUDGE] AI scoring failed, using exact text matching: {e}")
            return exact_match_judgment(correct_answer, user_answer)

    async def judge_all(self, triples: Iterable[Tuple[str, str, str]]) -> List[Judgment]:
        """
        Judge many answers concurrently.

        All requests are started before any is awaited, and the returned list
        lines up with the input order. Each request has already been turned
        into a fallback judgment on failure, so the join itself cannot fail.
        """
        tasks = [
            asyncio.ensure_future(self.judge(question, correct_answer, user_answer))
            for question, correct_answer, user_answer in triples
        ]
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "JudgingClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
