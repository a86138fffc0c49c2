# FILE: assignment_hub/services/grading.py
"""
Objective grading of submitted answers

Every question carries the same weight. Only MCQs have an answer key, so
other question types count toward the total but can never earn points.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence

from assignment_hub.models.assignments import Question, QuestionFormat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradingResult:
    questions: List[Question]
    score: int
    correct_count: int
    total_count: int
    earned: float
    possible: float


def percentage(correct: int, total: int) -> int:
    """correct/total as a whole percentage, halves rounded up; 0 when total is 0"""
    if total <= 0:
        return 0
    value = Decimal(correct * 100) / Decimal(total)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def grade_question(question: Question) -> Question:
    """Return a graded copy of one question"""
    if question.type == QuestionFormat.MCQ:
        is_correct = question.student_answer == question.correct_answer
    else:
        is_correct = None
    return question.model_copy(update={"is_correct": is_correct})


def grade_questions(questions: Sequence[Question], weight: float = 1.0) -> GradingResult:
    """
    Grade a question sequence without touching the inputs.

    Grading the same sequence twice gives the same result.
    """
    graded = [grade_question(q) for q in questions]
    correct = sum(1 for q in graded if q.is_correct is True)
    total = len(graded)
    score = percentage(correct, total)

    logger.info(f"[GRADE] {correct}/{total} correct -> {score}%")

    return GradingResult(
        questions=graded,
        score=score,
        correct_count=correct,
        total_count=total,
        earned=correct * weight,
        possible=total * weight,
    )
