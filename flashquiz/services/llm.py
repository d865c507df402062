import json
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from flashquiz import config
from flashquiz.exceptions import JudgeUnavailableError
from flashquiz.models import Judgment, Score

FALLBACK_RATIONALE = "AI unavailable - used exact text matching"

# Initialize OpenAI LLM
if not config.OPENAI_API_KEY:
    print("[LLM WARNING] No OPENAI_API_KEY found in environment, answers will be exact-matched")
    llm = None
else:
    print(f"[LLM] OpenAI API key loaded successfully ({config.OPENAI_MODEL})")
    # Low temperature for consistent scoring
    llm = ChatOpenAI(
        model=config.OPENAI_MODEL,
        temperature=0.1,
        max_tokens=150,
        api_key=config.OPENAI_API_KEY,
    )


def exact_match_judgment(correct_answer: str, user_answer: str) -> Judgment:
    """
    Judge an answer without the AI: case- and surrounding-whitespace-insensitive
    exact match.
    """
    is_match = user_answer.strip().lower() == correct_answer.strip().lower()
    return Judgment(
        score=Score.correct if is_match else Score.incorrect,
        rationale=FALLBACK_RATIONALE
    )


def build_scoring_prompt(question: str, correct_answer: str, user_answer: str) -> str:
    return f"""You are scoring a flashcard quiz answer.

Question: "{question}"
Correct Answer: "{correct_answer}"
User's Answer: "{user_answer}"

Score the user's answer as one of:
- "correct": Answer is right or essentially equivalent
- "unsure": Answer is partially correct or ambiguous
- "incorrect": Answer is wrong

Provide a brief rationale (max 20 words) explaining the scoring.

Respond in this exact JSON format:
{{
  "score": "correct|unsure|incorrect",
  "rationale": "Brief explanation of scoring"
}}"""


def parse_judgment(response_text: str) -> Judgment:
    """
    Pull the JSON object out of a model reply and validate it.

    Raises:
        JudgeUnavailableError: if no valid judgment can be read from the reply
    """
    start_idx = response_text.find('{')
    end_idx = response_text.rfind('}') + 1
    if start_idx == -1 or end_idx <= start_idx:
        raise JudgeUnavailableError("Could not find JSON object in judge response")

    try:
        data = json.loads(response_text[start_idx:end_idx])
        return Judgment.model_validate(data)
    except json.JSONDecodeError as e:
        raise JudgeUnavailableError(f"Failed to parse judge response: {e}") from e
    except ValidationError as e:
        raise JudgeUnavailableError(f"Invalid judgment from judge: {e}") from e


def judge_answer_with_llm(question: str, correct_answer: str, user_answer: str) -> Judgment:
    """
    Ask the LLM whether a flashcard answer is correct.

    Args:
        question: The card question
        correct_answer: The answer stored on the card
        user_answer: What the respondent typed

    Returns:
        Judgment with score (correct/unsure/incorrect) and a short rationale

    Raises:
        JudgeUnavailableError: if the LLM is not configured, fails, or replies
            with something that is not a valid judgment
    """
    if not llm:
        raise JudgeUnavailableError("OpenAI API not configured")

    prompt = build_scoring_prompt(question, correct_answer, user_answer)
    try:
        response = llm.invoke(prompt)
    except Exception as e:
        raise JudgeUnavailableError(f"LLM call failed: {e}") from e

    response_text = str(response.content or "").strip()
    if not response_text:
        raise JudgeUnavailableError("No response from OpenAI")

    return parse_judgment(response_text)
