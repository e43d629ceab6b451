"""Per-answer scoring rules for quiz questions.

Everything here is pure: a grader reads only the in-memory question (and its
loaded options) plus what the student submitted, and returns a
``GradingResult``. Persistence and aggregation live in the attempt service.
"""
import logging
import re
from typing import Callable, Dict, Iterable, List, Optional

from app.core.constants import QuestionTypeEnum
from app.models.question import Question
from app.schemas.quiz_attempt import GradingResult

logger = logging.getLogger(__name__)

LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_numeric_answer(text: Optional[str]) -> float:
    """Read the leading number of a free-text answer, so "3.05 m/s" is 3.05.

    Blank input or text that does not start with a number counts as 0.
    """
    if text is None:
        return 0.0
    match = LEADING_NUMBER.match(str(text))
    if not match:
        return 0.0
    return float(match.group(1))


def keyword_match_percentage(text: Optional[str], keywords: Optional[Iterable[str]]) -> float:
    keywords = [k for k in (keywords or []) if k]
    if not keywords:
        return 0.0
    haystack = (text or "").lower()
    matched = sum(1 for keyword in keywords if keyword.lower() in haystack)
    return matched / len(keywords) * 100


def _grade_mcq(question: Question, selected_option_ids: List[int], text_answer: Optional[str]) -> GradingResult:
    # No partial credit: the selected set must equal the correct set exactly.
    is_correct = set(selected_option_ids or []) == question.correct_option_ids
    return GradingResult(is_correct=is_correct, score=question.marks if is_correct else 0.0)


def _grade_numerical(question: Question, selected_option_ids: List[int], text_answer: Optional[str]) -> GradingResult:
    submitted = parse_numeric_answer(text_answer)
    expected = question.correct_answer or 0.0
    tolerance = question.tolerance or 0.0
    is_correct = abs(submitted - expected) <= tolerance
    return GradingResult(is_correct=is_correct, score=question.marks if is_correct else 0.0)


def _grade_descriptive(question: Question, selected_option_ids: List[int], text_answer: Optional[str]) -> GradingResult:
    percentage = keyword_match_percentage(text_answer, question.keywords)
    threshold = question.threshold or 0.0
    score = question.marks * percentage / 100 if percentage >= threshold else 0.0
    return GradingResult(
        is_correct=score > 0,
        score=score,
        keyword_match_percentage=percentage,
    )


_GRADERS: Dict[QuestionTypeEnum, Callable[[Question, List[int], Optional[str]], GradingResult]] = {
    QuestionTypeEnum.SINGLE_MCQ: _grade_mcq,
    QuestionTypeEnum.MULTI_MCQ: _grade_mcq,
    QuestionTypeEnum.NUMERICAL: _grade_numerical,
    QuestionTypeEnum.DESCRIPTIVE: _grade_descriptive,
}

_missing = [t.value for t in QuestionTypeEnum if t not in _GRADERS]
if _missing:
    raise RuntimeError(f"No grader registered for question type(s): {', '.join(_missing)}")


def grade_answer(question: Question, selected_option_ids: Optional[List[int]], text_answer: Optional[str]) -> GradingResult:
    try:
        question_type = QuestionTypeEnum(question.question_type)
    except ValueError:
        logger.warning(
            "Question %s has unknown type %r; awarding zero.", question.id, question.question_type
        )
        return GradingResult(is_correct=False, score=0.0)

    return _GRADERS[question_type](question, list(selected_option_ids or []), text_answer)
