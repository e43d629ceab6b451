import pytest

from app.core.constants import QuestionTypeEnum
from app.models.question import Question, Option
from app.services.grading import grade_answer, keyword_match_percentage, parse_numeric_answer


def _mcq(question_type=QuestionTypeEnum.MULTI_MCQ, correct=(1, 3), marks=4):
    return Question(
        id="q-mcq",
        question_type=question_type,
        text="Pick the convex losses",
        marks=marks,
        options=[Option(id=i, text=f"Option {i}", is_correct=i in correct) for i in range(1, 5)],
    )


def _numerical(correct_answer=10.5, tolerance=0.5, marks=2):
    return Question(
        id="q-num",
        question_type=QuestionTypeEnum.NUMERICAL,
        text="Area under the curve?",
        marks=marks,
        correct_answer=correct_answer,
        tolerance=tolerance,
    )


def _descriptive(keywords=("gradient", "descent", "learning rate"), threshold=50, marks=6):
    return Question(
        id="q-desc",
        question_type=QuestionTypeEnum.DESCRIPTIVE,
        text="Explain how a model is trained",
        marks=marks,
        keywords=list(keywords),
        threshold=threshold,
    )


def test_mcq_exact_set_scores_full_marks():
    result = grade_answer(_mcq(), [3, 1], None)
    assert result.is_correct is True
    assert result.score == 4


@pytest.mark.parametrize("selected", [[1], [1, 2, 3], [], [2, 4]])
def test_mcq_without_exact_set_scores_zero(selected):
    result = grade_answer(_mcq(), selected, None)
    assert result.is_correct is False
    assert result.score == 0


def test_single_mcq_correct_option():
    question = _mcq(QuestionTypeEnum.SINGLE_MCQ, correct=(2,), marks=1)
    assert grade_answer(question, [2], None).score == 1
    assert grade_answer(question, [1], None).score == 0


@pytest.mark.parametrize("answer, expected", [("10.4", 2), ("10.5", 2), ("10.6", 2), ("11.01", 0), ("9.99", 0)])
def test_numerical_tolerance_is_inclusive(answer, expected):
    assert grade_answer(_numerical(), [], answer).score == expected


def test_numerical_blank_or_garbage_counts_as_zero():
    question = _numerical(correct_answer=0.0, tolerance=0.0, marks=1)
    assert grade_answer(question, [], "").is_correct is True
    assert grade_answer(question, [], "abc").is_correct is True
    assert grade_answer(_numerical(), [], "abc").score == 0


def test_numerical_accepts_surrounding_whitespace():
    assert grade_answer(_numerical(correct_answer=3.0, tolerance=0.1, marks=5), [], "  3.05 ").score == 5


def test_numerical_reads_leading_number_before_units():
    question = _numerical(correct_answer=3.0, tolerance=0.1, marks=5)
    result = grade_answer(question, [], "3.05 m/s")
    assert result.is_correct is True
    assert result.score == 5
    assert grade_answer(question, [], "m/s 3.05").score == 0


def test_descriptive_below_threshold_scores_zero():
    result = grade_answer(_descriptive(), [], "We use gradient updates.")
    assert result.score == 0
    assert result.is_correct is False
    assert result.keyword_match_percentage == pytest.approx(100 / 3)


def test_descriptive_proportional_marks_above_threshold():
    result = grade_answer(_descriptive(), [], "Gradient DESCENT iterates until convergence.")
    assert result.score == pytest.approx(6 * 2 / 3)
    assert result.is_correct is True
    assert result.keyword_match_percentage == pytest.approx(200 / 3)


def test_descriptive_all_keywords_full_marks():
    result = grade_answer(_descriptive(), [], "gradient descent with a tuned learning rate")
    assert result.score == pytest.approx(6)


def test_unknown_question_type_scores_zero():
    question = Question(id="q-odd", question_type="TRUE_FALSE", text="?", marks=3)
    result = grade_answer(question, [1], "true")
    assert result.is_correct is False
    assert result.score == 0


def test_parse_numeric_answer():
    assert parse_numeric_answer(" 2.5 ") == 2.5
    assert parse_numeric_answer(None) == 0.0
    assert parse_numeric_answer("") == 0.0
    assert parse_numeric_answer("1,5") == 1.0
    assert parse_numeric_answer("-4e2 newtons") == -400.0
    assert parse_numeric_answer(".5") == 0.5
    assert parse_numeric_answer("about 3") == 0.0


def test_keyword_match_percentage_is_case_insensitive():
    assert keyword_match_percentage("ReLU and Sigmoid", ["relu", "sigmoid", "tanh", "softmax"]) == 50
    assert keyword_match_percentage("anything", []) == 0
    assert keyword_match_percentage(None, ["relu"]) == 0
