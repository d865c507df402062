from typing import Sequence
from flashquiz.models import Judgment, Score, ScoreSummary

# Points per judged answer
SCORE_POINTS = {
    Score.correct: 1.0,
    Score.unsure: 0.5,
    Score.incorrect: 0.0,
}


def calculate_percentage(judgments: Sequence[Judgment]) -> int:
    """
    Percentage of available points earned, rounded half up to an integer.

    Returns 0 for an empty list.
    """
    total = len(judgments)
    if total == 0:
        return 0

    # Count in half points so the rounding stays exact (12.5 -> 13)
    half_points = sum(int(SCORE_POINTS[j.score] * 2) for j in judgments)
    return (half_points * 100 + total) // (2 * total)


def summarize_judgments(judgments: Sequence[Judgment]) -> ScoreSummary:
    """
    Combine per-card judgments into a score summary.

    Args:
        judgments: One judgment per answered card, in any order

    Returns:
        ScoreSummary with percentage and correct/unsure/incorrect counts
    """
    correct = sum(1 for j in judgments if j.score == Score.correct)
    unsure = sum(1 for j in judgments if j.score == Score.unsure)

    return ScoreSummary(
        percentage=calculate_percentage(judgments),
        correct=correct,
        unsure=unsure,
        incorrect=len(judgments) - correct - unsure,
        total=len(judgments)
    )
