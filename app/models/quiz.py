import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Float, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

quiz_courses_association = Table(
    "quiz_courses_association",
    Base.metadata,
    Column("quiz_id", String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), primary_key=True),
    Column("course_id", Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
)

quiz_teachers_association = Table(
    "quiz_teachers_association",
    Base.metadata,
    Column("quiz_id", String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True, default="")
    time_limit = Column(Integer, nullable=False)  # minutes
    max_marks = Column(Float, nullable=True)
    scheduled_for = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    created_by = relationship("User", foreign_keys=[created_by_id])
    courses = relationship("Course", secondary=quiz_courses_association, back_populates="quizzes")
    teachers = relationship("User", secondary=quiz_teachers_association)
    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.order",
    )
    attempts = relationship("QuizAttempt", back_populates="quiz", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def course_ids(self):
        return [course.id for course in self.courses]

    @property
    def teacher_ids(self):
        return [teacher.id for teacher in self.teachers]

    @property
    def total_questions(self):
        return len(self.questions)
