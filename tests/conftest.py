import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import uuid
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import main
from app.core.constants import RoleEnum, EnrollmentStatusEnum
from app.core.database import Base
from app.core.security import create_access_token
from app.models.course import Course
from app.models.course_enrollment import Enrollment
from app.models.question import Question, Option
from app.models.quiz import Quiz
from app.models.user import User
from app.models import attendance, quiz_attempt, subject  # noqa: F401  registers tables
from app.utils import deps as deps_utils


@pytest.fixture(scope="session")
def database_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(database_engine):
    Base.metadata.create_all(bind=database_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()
        Base.metadata.drop_all(bind=database_engine)


@pytest.fixture(scope="function")
def client(db_session):
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _factory(role: RoleEnum = RoleEnum.STUDENT, enrollment_number=None, is_active=True, full_name=None):
        suffix = uuid.uuid4().hex[:8]
        if role == RoleEnum.STUDENT and enrollment_number is None:
            enrollment_number = f"EN{suffix}"
        user = User(
            full_name=full_name or f"Test {role.value.title()} {suffix}",
            email=f"{role.value}-{suffix}@test.com",
            role=role,
            enrollment_number=enrollment_number,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _factory


@pytest.fixture
def teacher(make_user):
    return make_user(RoleEnum.TEACHER)


@pytest.fixture
def student(make_user):
    return make_user(RoleEnum.STUDENT)


@pytest.fixture
def admin(make_user):
    return make_user(RoleEnum.ADMIN)


@pytest.fixture
def auth_headers():
    def _headers(user: User, role: RoleEnum = None):
        token = create_access_token(user.id, role or user.role)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def course(db_session, teacher):
    new_course = Course(code=f"CS{uuid.uuid4().hex[:5]}", title="Machine Learning", description="Test course")
    new_course.teachers = [teacher]
    db_session.add(new_course)
    db_session.commit()
    db_session.refresh(new_course)
    return new_course


@pytest.fixture
def enroll(db_session):
    def _enroll(user: User, course: Course, status: EnrollmentStatusEnum = EnrollmentStatusEnum.ACCEPTED):
        enrollment = Enrollment(user_id=user.id, course_id=course.id, status=status)
        db_session.add(enrollment)
        db_session.commit()
        return enrollment
    return _enroll


@pytest.fixture
def make_quiz(db_session, teacher, course):
    """Builds an active quiz with an MCQ and a numerical question, worth 5 marks each."""
    def _factory(is_active=True, scheduled_for=None, time_limit=30, courses=None, title="Unit quiz"):
        quiz = Quiz(
            title=title,
            description="",
            time_limit=time_limit,
            max_marks=10,
            scheduled_for=scheduled_for,
            is_active=is_active,
            created_by_id=teacher.id,
        )
        quiz.courses = courses if courses is not None else [course]
        quiz.teachers = [teacher]
        quiz.questions = [
            Question(
                question_type="SINGLE_MCQ",
                text="Which optimiser uses momentum?",
                order=1,
                marks=5,
                options=[
                    Option(text="Adam", is_correct=True),
                    Option(text="Plain SGD", is_correct=False),
                ],
            ),
            Question(
                question_type="NUMERICAL",
                text="Learning rate after one decay step?",
                order=2,
                marks=5,
                correct_answer=3.0,
                tolerance=0.1,
            ),
        ]
        db_session.add(quiz)
        db_session.commit()
        db_session.refresh(quiz)
        return quiz
    return _factory

