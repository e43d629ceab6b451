from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.models.question import Question, Option
from tests.helpers.asserts import api_call, data_of, assert_error


MCQ_PAYLOAD = {
    "question_type": "SINGLE_MCQ",
    "text": "Which activation is linear for positive inputs?",
    "marks": 2,
    "order": 1,
    "options": [
        {"text": "ReLU", "is_correct": True},
        {"text": "Sigmoid", "is_correct": False},
    ],
}


def _create_quiz(client, headers, course_id, **overrides):
    payload = {"title": "Unit 1 quiz", "time_limit": 20, "max_marks": 10, "course_ids": [course_id]}
    payload.update(overrides)
    r = api_call(client, "POST", "/quizzes/teacher/", headers=headers, json=payload)
    assert r.status_code == 201
    return data_of(r)


def test_requests_without_token_are_rejected(client: TestClient):
    r = client.get("/quizzes/teacher/my-quizzes")
    assert_error(r, 401, "UNAUTHORIZED")


def test_inactive_user_is_forbidden(client: TestClient, make_user, auth_headers):
    inactive = make_user(RoleEnum.TEACHER, is_active=False)
    r = client.get("/quizzes/teacher/my-quizzes", headers=auth_headers(inactive))
    assert_error(r, 403, "FORBIDDEN")


def test_teacher_creates_inactive_quiz(client: TestClient, teacher, course, auth_headers):
    quiz = _create_quiz(client, auth_headers(teacher), course.id)
    assert quiz["is_active"] is False
    assert quiz["created_by_id"] == teacher.id
    assert quiz["teacher_ids"] == [teacher.id]
    assert quiz["course_ids"] == [course.id]
    assert quiz["total_questions"] == 0

    r = api_call(client, "GET", "/quizzes/teacher/my-quizzes", headers=auth_headers(teacher))
    assert [q["id"] for q in data_of(r)] == [quiz["id"]]


def test_create_quiz_with_unknown_course_is_not_found(client: TestClient, teacher, auth_headers):
    r = client.post(
        "/quizzes/teacher/",
        headers=auth_headers(teacher),
        json={"title": "Orphan", "time_limit": 10, "course_ids": [999]},
    )
    assert_error(r, 404, "NOT_FOUND")


def test_student_cannot_create_quiz(client: TestClient, student, course, auth_headers):
    r = client.post(
        "/quizzes/teacher/",
        headers=auth_headers(student),
        json={"title": "Nope", "time_limit": 10, "course_ids": [course.id]},
    )
    assert_error(r, 403, "FORBIDDEN")


def test_other_teacher_cannot_manage_quiz(client: TestClient, teacher, course, make_user, auth_headers):
    quiz = _create_quiz(client, auth_headers(teacher), course.id)
    outsider = make_user(RoleEnum.TEACHER)
    r = client.patch(f"/quizzes/teacher/{quiz['id']}/toggle-status", headers=auth_headers(outsider))
    assert_error(r, 403, "FORBIDDEN")


def test_admin_can_view_any_quiz(client: TestClient, teacher, admin, course, auth_headers):
    quiz = _create_quiz(client, auth_headers(teacher), course.id)
    r = api_call(client, "GET", f"/quizzes/teacher/{quiz['id']}", headers=auth_headers(admin))
    assert data_of(r)["title"] == "Unit 1 quiz"


def test_update_quiz_and_empty_update_rejected(client: TestClient, teacher, course, auth_headers):
    headers = auth_headers(teacher)
    quiz = _create_quiz(client, headers, course.id)

    r = api_call(client, "PUT", f"/quizzes/teacher/{quiz['id']}", headers=headers, json={"time_limit": 45})
    assert data_of(r)["time_limit"] == 45

    r = client.put(f"/quizzes/teacher/{quiz['id']}", headers=headers, json={})
    assert_error(r, 422, "VALIDATION_ERROR")


def test_toggle_quiz_status(client: TestClient, teacher, course, auth_headers):
    headers = auth_headers(teacher)
    quiz = _create_quiz(client, headers, course.id)

    r = api_call(client, "PATCH", f"/quizzes/teacher/{quiz['id']}/toggle-status", headers=headers)
    assert data_of(r)["is_active"] is True
    r = api_call(client, "PATCH", f"/quizzes/teacher/{quiz['id']}/toggle-status", headers=headers)
    assert data_of(r)["is_active"] is False


def test_add_question_and_answer_key_visible_to_owner(client: TestClient, teacher, course, auth_headers):
    headers = auth_headers(teacher)
    quiz = _create_quiz(client, headers, course.id)

    r = api_call(client, "POST", f"/quizzes/teacher/{quiz['id']}/questions", headers=headers, json=MCQ_PAYLOAD)
    question = data_of(r)
    assert question["quiz_id"] == quiz["id"]
    assert [o["is_correct"] for o in question["options"]] == [True, False]

    r = api_call(client, "GET", f"/quizzes/teacher/{quiz['id']}", headers=headers)
    assert data_of(r)["total_questions"] == 1


def test_question_validation_rules(client: TestClient, teacher, course, auth_headers):
    headers = auth_headers(teacher)
    quiz = _create_quiz(client, headers, course.id)
    url = f"/quizzes/teacher/{quiz['id']}/questions"

    invalid_payloads = [
        {**MCQ_PAYLOAD, "options": [{"text": "Only one", "is_correct": True}]},
        {**MCQ_PAYLOAD, "options": [{"text": "A", "is_correct": True}, {"text": "B", "is_correct": True}]},
        {**MCQ_PAYLOAD, "question_type": "MULTI_MCQ", "options": [{"text": "A"}, {"text": "B"}]},
        {"question_type": "NUMERICAL", "text": "Value?", "marks": 1},
        {"question_type": "DESCRIPTIVE", "text": "Explain", "marks": 3, "keywords": ["  "]},
        {"question_type": "NUMERICAL", "text": "Value?", "marks": 1, "correct_answer": 2, "options": MCQ_PAYLOAD["options"]},
        {**MCQ_PAYLOAD, "marks": 0},
    ]
    for payload in invalid_payloads:
        r = client.post(url, headers=headers, json=payload)
        assert_error(r, 422, "VALIDATION_ERROR")


def test_numerical_question_defaults_tolerance(client: TestClient, teacher, course, auth_headers):
    headers = auth_headers(teacher)
    quiz = _create_quiz(client, headers, course.id)
    r = api_call(
        client, "POST", f"/quizzes/teacher/{quiz['id']}/questions", headers=headers,
        json={"question_type": "NUMERICAL", "text": "2 + 2?", "marks": 1, "correct_answer": 4},
    )
    assert data_of(r)["tolerance"] == 0


def test_update_question_replaces_options(client: TestClient, teacher, course, auth_headers):
    headers = auth_headers(teacher)
    quiz = _create_quiz(client, headers, course.id)
    question = data_of(api_call(client, "POST", f"/quizzes/teacher/{quiz['id']}/questions", headers=headers, json=MCQ_PAYLOAD))

    updated_payload = {
        **MCQ_PAYLOAD,
        "question_type": "MULTI_MCQ",
        "options": [
            {"text": "ReLU", "is_correct": True},
            {"text": "Leaky ReLU", "is_correct": True},
            {"text": "Tanh", "is_correct": False},
        ],
    }
    r = api_call(
        client, "PUT", f"/quizzes/teacher/{quiz['id']}/questions/{question['id']}",
        headers=headers, json=updated_payload,
    )
    updated = data_of(r)
    assert updated["question_type"] == "MULTI_MCQ"
    assert [o["text"] for o in updated["options"]] == ["ReLU", "Leaky ReLU", "Tanh"]


def test_question_from_other_quiz_is_not_found(client: TestClient, teacher, course, auth_headers):
    headers = auth_headers(teacher)
    first = _create_quiz(client, headers, course.id)
    second = _create_quiz(client, headers, course.id, title="Unit 2 quiz")
    question = data_of(api_call(client, "POST", f"/quizzes/teacher/{first['id']}/questions", headers=headers, json=MCQ_PAYLOAD))

    r = client.delete(f"/quizzes/teacher/{second['id']}/questions/{question['id']}", headers=headers)
    assert_error(r, 404, "NOT_FOUND")


def test_delete_quiz_cascades_to_questions(client: TestClient, db_session: Session, teacher, course, auth_headers):
    headers = auth_headers(teacher)
    quiz = _create_quiz(client, headers, course.id)
    api_call(client, "POST", f"/quizzes/teacher/{quiz['id']}/questions", headers=headers, json=MCQ_PAYLOAD)

    api_call(client, "DELETE", f"/quizzes/teacher/{quiz['id']}", headers=headers)
    db_session.expire_all()

    assert db_session.query(Question).filter(Question.quiz_id == quiz["id"]).count() == 0
    assert db_session.query(Option).count() == 0
    r = client.get(f"/quizzes/teacher/{quiz['id']}", headers=headers)
    assert_error(r, 404, "NOT_FOUND")
