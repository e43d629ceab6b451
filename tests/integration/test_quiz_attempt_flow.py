from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum, EnrollmentStatusEnum
from app.models.quiz_attempt import Answer, QuizAttempt
from tests.helpers.asserts import api_call, data_of, assert_error


def _answers(quiz, option_choice="correct", numeric="3.05"):
    mcq, numerical = quiz.questions
    wanted = [o.id for o in mcq.options if o.is_correct == (option_choice == "correct")]
    return [
        {"question_id": mcq.id, "selected_options": wanted[:1]},
        {"question_id": numerical.id, "text_answer": numeric},
    ]


def _start(client, quiz_id, headers):
    return client.post(f"/quizzes/student/{quiz_id}/start", headers=headers)


def test_start_submit_and_review_attempt(client: TestClient, db_session: Session, student, course, enroll, make_quiz, auth_headers):
    """
    Happy path: enrolled student starts an open quiz, submits, and the graded
    attempt is readable afterwards with a score equal to the sum of its answers.
    """
    print("\n[TEST] Quiz attempt flow")
    enroll(student, course)
    quiz = make_quiz()
    headers = auth_headers(student)

    print("[1] Starting attempt")
    r = _start(client, quiz.id, headers)
    assert r.status_code == 201, r.text
    attempt = data_of(r)
    assert attempt["status"] == "IN_PROGRESS"
    assert attempt["score"] is None

    print("[2] Submitting answers")
    r = api_call(
        client, "POST", f"/quizzes/student/attempts/{attempt['id']}/submit",
        headers=headers, json={"answers": _answers(quiz)},
    )
    submitted = data_of(r)
    assert submitted["status"] == "SUBMITTED"
    assert submitted["score"] == 10
    assert submitted["submitted_at"] is not None
    assert submitted["quiz_title"] == quiz.title
    assert len(submitted["answers"]) == 2
    assert all(a["is_correct"] for a in submitted["answers"])

    print("[3] Reviewing attempt")
    r = api_call(client, "GET", f"/quizzes/student/attempts/{attempt['id']}", headers=headers)
    review = data_of(r)
    assert review["score"] == sum(a["score"] for a in review["answers"])
    print("[OK] Attempt flow complete")


def test_wrong_answers_score_zero(client: TestClient, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    headers = auth_headers(student)
    attempt = data_of(_start(client, quiz.id, headers))

    r = api_call(
        client, "POST", f"/quizzes/student/attempts/{attempt['id']}/submit",
        headers=headers, json={"answers": _answers(quiz, option_choice="wrong", numeric="not a number")},
    )
    assert data_of(r)["score"] == 0


def test_double_submit_is_rejected_and_keeps_first_result(client: TestClient, db_session: Session, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    headers = auth_headers(student)
    attempt = data_of(_start(client, quiz.id, headers))
    url = f"/quizzes/student/attempts/{attempt['id']}/submit"

    api_call(client, "POST", url, headers=headers, json={"answers": _answers(quiz)})
    r = client.post(url, headers=headers, json={"answers": _answers(quiz, option_choice="wrong")})
    error = assert_error(r, 409, "INVALID_STATE")
    assert error["details"]["retryable"] is False

    r = api_call(client, "GET", f"/quizzes/student/attempts/{attempt['id']}", headers=headers)
    assert data_of(r)["score"] == 10
    assert db_session.query(Answer).filter(Answer.attempt_id == attempt["id"]).count() == 2


def test_second_start_reports_existing_attempt(client: TestClient, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    headers = auth_headers(student)
    attempt = data_of(_start(client, quiz.id, headers))

    error = assert_error(_start(client, quiz.id, headers), 409, "INVALID_STATE")
    assert error["details"]["attempt_id"] == attempt["id"]

    api_call(client, "POST", f"/quizzes/student/attempts/{attempt['id']}/submit", headers=headers, json={"answers": []})
    error = assert_error(_start(client, quiz.id, headers), 409, "INVALID_STATE")
    assert error["details"]["attempt_id"] == attempt["id"]


def test_foreign_and_repeated_answers_are_skipped(client: TestClient, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    other = make_quiz(title="Other quiz")
    headers = auth_headers(student)
    attempt = data_of(_start(client, quiz.id, headers))

    answers = _answers(quiz)
    wrong_repeat = {**answers[1], "text_answer": "99"}
    foreign = _answers(other)[0]
    r = api_call(
        client, "POST", f"/quizzes/student/attempts/{attempt['id']}/submit",
        headers=headers, json={"answers": [*answers, wrong_repeat, foreign]},
    )
    submitted = data_of(r)
    assert submitted["score"] == 10
    assert {a["question_id"] for a in submitted["answers"]} == {q.id for q in quiz.questions}


def test_student_cannot_submit_someone_elses_attempt(client: TestClient, student, make_user, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    attempt = data_of(_start(client, quiz.id, auth_headers(student)))

    intruder = make_user(RoleEnum.STUDENT)
    r = client.post(
        f"/quizzes/student/attempts/{attempt['id']}/submit", headers=auth_headers(intruder), json={"answers": []}
    )
    assert_error(r, 403, "FORBIDDEN")
    r = client.get(f"/quizzes/student/attempts/{attempt['id']}", headers=auth_headers(intruder))
    assert_error(r, 403, "FORBIDDEN")


def test_unknown_attempt_is_not_found(client: TestClient, student, auth_headers):
    r = client.post("/quizzes/student/attempts/missing/submit", headers=auth_headers(student), json={"answers": []})
    assert_error(r, 404, "NOT_FOUND")


def test_not_enrolled_student_is_forbidden(client: TestClient, student, course, enroll, make_quiz, auth_headers):
    quiz = make_quiz()
    assert_error(_start(client, quiz.id, auth_headers(student)), 403, "FORBIDDEN")


def test_pending_enrollment_is_not_enough(client: TestClient, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course, status=EnrollmentStatusEnum.PENDING)
    quiz = make_quiz()
    assert_error(_start(client, quiz.id, auth_headers(student)), 403, "FORBIDDEN")


def test_teacher_cannot_start_attempt(client: TestClient, teacher, make_quiz, auth_headers):
    quiz = make_quiz()
    assert_error(_start(client, quiz.id, auth_headers(teacher)), 403, "FORBIDDEN")


def test_closed_quizzes_cannot_be_started(client: TestClient, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    headers = auth_headers(student)
    now = datetime.now(timezone.utc)

    inactive = make_quiz(is_active=False, title="Inactive")
    assert_error(_start(client, inactive.id, headers), 409, "INVALID_STATE")

    future = make_quiz(is_active=True, scheduled_for=now + timedelta(hours=1), title="Future")
    assert_error(_start(client, future.id, headers), 409, "INVALID_STATE")

    expired = make_quiz(is_active=True, scheduled_for=now - timedelta(hours=2), time_limit=30, title="Expired")
    assert_error(_start(client, expired.id, headers), 409, "INVALID_STATE")


def test_scheduled_quiz_needs_both_window_and_active_flag(client: TestClient, teacher, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    headers = auth_headers(student)
    quiz = make_quiz(is_active=False, scheduled_for=datetime.now(timezone.utc) - timedelta(minutes=5), time_limit=30)

    assert_error(_start(client, quiz.id, headers), 409, "INVALID_STATE")
    r = api_call(client, "GET", "/quizzes/student/available", headers=headers)
    assert data_of(r) == []

    api_call(client, "PATCH", f"/quizzes/teacher/{quiz.id}/toggle-status", headers=auth_headers(teacher))
    r = _start(client, quiz.id, headers)
    assert r.status_code == 201, r.text


def test_student_paper_hides_answer_key(client: TestClient, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    r = api_call(client, "GET", f"/quizzes/student/{quiz.id}", headers=auth_headers(student))
    paper = data_of(r)
    assert len(paper["questions"]) == 2
    mcq = paper["questions"][0]
    assert "is_correct" not in mcq["options"][0]
    assert "correct_answer" not in paper["questions"][1]


def test_available_stats_and_history(client: TestClient, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    headers = auth_headers(student)
    now = datetime.now(timezone.utc)

    done = make_quiz(title="Done")
    open_quiz = make_quiz(title="Open")
    missed = make_quiz(is_active=False, scheduled_for=now - timedelta(hours=3), time_limit=30, title="Missed")

    r = api_call(client, "GET", "/quizzes/student/available", headers=headers)
    assert {q["title"] for q in data_of(r)} == {"Done", "Open"}

    attempt = data_of(_start(client, done.id, headers))
    api_call(
        client, "POST", f"/quizzes/student/attempts/{attempt['id']}/submit",
        headers=headers, json={"answers": _answers(done)},
    )

    r = api_call(client, "GET", "/quizzes/student/available", headers=headers)
    assert [q["id"] for q in data_of(r)] == [open_quiz.id]

    r = api_call(client, "GET", "/quizzes/student/stats", headers=headers)
    assert data_of(r) == {"upcoming": 1, "completed": 1, "missed": 1}

    r = api_call(client, "GET", "/quizzes/student/history", headers=headers)
    history = data_of(r)
    assert [(h["title"], h["status"]) for h in history] == [("Done", "SUBMITTED"), ("Missed", "MISSED")]
    assert history[0]["score"] == 10
    assert history[1]["quiz_id"] == missed.id


def test_teacher_sees_quiz_attempts(client: TestClient, teacher, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    attempt = data_of(_start(client, quiz.id, auth_headers(student)))
    api_call(
        client, "POST", f"/quizzes/student/attempts/{attempt['id']}/submit",
        headers=auth_headers(student), json={"answers": _answers(quiz)},
    )

    r = api_call(client, "GET", f"/quizzes/teacher/{quiz.id}/attempts", headers=auth_headers(teacher))
    attempts = data_of(r)
    assert [a["user_id"] for a in attempts] == [student.id]
    assert attempts[0]["max_marks"] == 10

    r = api_call(client, "GET", f"/quizzes/student/attempts/{attempt['id']}", headers=auth_headers(teacher))
    assert data_of(r)["score"] == 10


def test_failed_status_flip_rolls_back_answers(client: TestClient, db_session: Session, monkeypatch, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    headers = auth_headers(student)
    attempt = data_of(_start(client, quiz.id, headers))
    url = f"/quizzes/student/attempts/{attempt['id']}/submit"

    flushed = []

    def failing_mark_submitted(db, **kwargs):
        flushed.append(db.query(Answer).filter(Answer.attempt_id == attempt["id"]).count())
        raise SQLAlchemyError("connection dropped")

    monkeypatch.setattr("app.crud.quiz_attempt.quiz_attempt.mark_submitted", failing_mark_submitted, raising=True)
    error = assert_error(client.post(url, headers=headers, json={"answers": _answers(quiz)}), 503, "TRANSIENT_STORE_ERROR")
    assert error["details"]["retryable"] is True
    assert flushed == [2]

    db_session.expire_all()
    assert db_session.query(Answer).filter(Answer.attempt_id == attempt["id"]).count() == 0
    assert db_session.get(QuizAttempt, attempt["id"]).status.value == "IN_PROGRESS"

    monkeypatch.undo()
    r = api_call(client, "POST", url, headers=headers, json={"answers": _answers(quiz)})
    assert data_of(r)["score"] == 10


def test_concurrent_start_hits_unique_constraint(client: TestClient, monkeypatch, student, course, enroll, make_quiz, auth_headers):
    enroll(student, course)
    quiz = make_quiz()
    headers = auth_headers(student)
    data_of(_start(client, quiz.id, headers))

    # The second request misses the first one's row and only the constraint stops it.
    monkeypatch.setattr(
        "app.crud.quiz_attempt.quiz_attempt.get_by_user_and_quiz", lambda db, **kwargs: None, raising=True
    )
    error = assert_error(_start(client, quiz.id, headers), 409, "INVALID_STATE")
    assert error["details"]["retryable"] is False
    assert error["details"]["quiz_id"] == quiz.id
