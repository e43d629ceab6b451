"""Create quiz, attempt, CO mapping, score sheet and attendance tables

Revision ID: 4c2d9e7a1b30
Revises:
Create Date: 2026-10-17 09:12:44.120938

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '4c2d9e7a1b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

role_enum = sa.Enum('STUDENT', 'TEACHER', 'ADMIN', name='roleenum')
enrollment_status_enum = sa.Enum('PENDING', 'ACCEPTED', 'REJECTED', name='enrollmentstatusenum')
question_type_enum = sa.Enum('SINGLE_MCQ', 'MULTI_MCQ', 'NUMERICAL', 'DESCRIPTIVE', name='questiontypeenum')
attempt_status_enum = sa.Enum('IN_PROGRESS', 'SUBMITTED', name='quizattemptstatusenum')
co_enum = sa.Enum('CO1', 'CO2', 'CO3', 'CO4', 'CO5', name='coenum')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', role_enum, nullable=False),
        sa.Column('enrollment_number', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_full_name', 'users', ['full_name'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_enrollment_number', 'users', ['enrollment_number'], unique=True)

    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_courses_id', 'courses', ['id'])
    op.create_index('ix_courses_code', 'courses', ['code'], unique=True)
    op.create_index('ix_courses_title', 'courses', ['title'])

    op.create_table(
        'course_teachers_association',
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', enrollment_status_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.UniqueConstraint('user_id', 'course_id', name='uq_enrollment_user_course'),
    )
    op.create_index('ix_enrollments_id', 'enrollments', ['id'])
    op.create_index('ix_enrollments_user_id', 'enrollments', ['user_id'])
    op.create_index('ix_enrollments_course_id', 'enrollments', ['course_id'])

    op.create_table(
        'quizzes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('time_limit', sa.Integer(), nullable=False),
        sa.Column('max_marks', sa.Float(), nullable=True),
        sa.Column('scheduled_for', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_quizzes_title', 'quizzes', ['title'])
    op.create_index('ix_quizzes_created_by_id', 'quizzes', ['created_by_id'])

    op.create_table(
        'quiz_courses_association',
        sa.Column('quiz_id', sa.String(36), sa.ForeignKey('quizzes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'quiz_teachers_association',
        sa.Column('quiz_id', sa.String(36), sa.ForeignKey('quizzes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'questions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('quiz_id', sa.String(36), sa.ForeignKey('quizzes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_type', question_type_enum, nullable=False),
        sa.Column('text', sa.String(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('marks', sa.Float(), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('correct_answer', sa.Float(), nullable=True),
        sa.Column('tolerance', sa.Float(), nullable=True),
        sa.Column('keywords', JSONType, nullable=True),
        sa.Column('threshold', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_questions_quiz_id', 'questions', ['quiz_id'])

    op.create_table(
        'options',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('question_id', sa.String(36), sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.String(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_options_id', 'options', ['id'])
    op.create_index('ix_options_question_id', 'options', ['question_id'])

    op.create_table(
        'quiz_attempts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('quiz_id', sa.String(36), sa.ForeignKey('quizzes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', attempt_status_enum, nullable=False),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('quiz_id', 'user_id', name='uq_quiz_attempt_quiz_user'),
    )
    op.create_index('ix_quiz_attempts_quiz_id', 'quiz_attempts', ['quiz_id'])
    op.create_index('ix_quiz_attempts_user_id', 'quiz_attempts', ['user_id'])

    op.create_table(
        'answers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('attempt_id', sa.String(36), sa.ForeignKey('quiz_attempts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', sa.String(36), sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('selected_options', JSONType, nullable=False),
        sa.Column('text_answer', sa.String(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('keyword_match_percentage', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.UniqueConstraint('attempt_id', 'question_id', name='uq_answer_attempt_question'),
    )
    op.create_index('ix_answers_id', 'answers', ['id'])
    op.create_index('ix_answers_attempt_id', 'answers', ['attempt_id'])
    op.create_index('ix_answers_question_id', 'answers', ['question_id'])

    op.create_table(
        'subjects',
        sa.Column('code', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_subjects_teacher_id', 'subjects', ['teacher_id'])

    op.create_table(
        'co_mappings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('subject_code', sa.String(), sa.ForeignKey('subjects.code', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('mst1_q1', co_enum, nullable=False),
        sa.Column('mst1_q2', co_enum, nullable=False),
        sa.Column('mst1_q3', co_enum, nullable=False),
        sa.Column('mst2_q1', co_enum, nullable=False),
        sa.Column('mst2_q2', co_enum, nullable=False),
        sa.Column('mst2_q3', co_enum, nullable=False),
        sa.Column('quiz_assignment', JSONType, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_co_mappings_id', 'co_mappings', ['id'])

    op.create_table(
        'score_sheets',
        sa.Column('enrollment_number', sa.String(), primary_key=True),
        sa.Column('subject_code', sa.String(), sa.ForeignKey('subjects.code', ondelete='CASCADE'), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        *[sa.Column(slot, sa.Float(), nullable=True) for slot in (
            'mst1_q1', 'mst1_q2', 'mst1_q3', 'mst2_q1', 'mst2_q2', 'mst2_q3', 'quiz_assignment',
            'end_sem_q1', 'end_sem_q2', 'end_sem_q3', 'end_sem_q4', 'end_sem_q5',
        )],
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'attendance_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('held_on', sa.Date(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_attendance_sessions_id', 'attendance_sessions', ['id'])
    op.create_index('ix_attendance_sessions_course_id', 'attendance_sessions', ['course_id'])
    op.create_index('ix_attendance_sessions_held_on', 'attendance_sessions', ['held_on'])

    op.create_table(
        'attendance_responses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('attendance_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('enrollment_number', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.UniqueConstraint('session_id', 'student_id', name='uq_attendance_response'),
    )
    op.create_index('ix_attendance_responses_id', 'attendance_responses', ['id'])
    op.create_index('ix_attendance_responses_session_id', 'attendance_responses', ['session_id'])
    op.create_index('ix_attendance_responses_student_id', 'attendance_responses', ['student_id'])


def downgrade() -> None:
    op.drop_table('attendance_responses')
    op.drop_table('attendance_sessions')
    op.drop_table('score_sheets')
    op.drop_table('co_mappings')
    op.drop_table('subjects')
    op.drop_table('answers')
    op.drop_table('quiz_attempts')
    op.drop_table('options')
    op.drop_table('questions')
    op.drop_table('quiz_teachers_association')
    op.drop_table('quiz_courses_association')
    op.drop_table('quizzes')
    op.drop_table('enrollments')
    op.drop_table('course_teachers_association')
    op.drop_table('courses')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in (co_enum, attempt_status_enum, question_type_enum, enrollment_status_enum, role_enum):
        enum.drop(bind, checkfirst=True)
