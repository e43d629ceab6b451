import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, Float, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import JSONB
from app.core.database import Base
from app.core.constants import QuestionTypeEnum

JSONType = JSON().with_variant(JSONB(), "postgresql")

class Question(Base):
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    question_type = Column(Enum(QuestionTypeEnum), nullable=False)
    text = Column(String, nullable=False)
    order = Column(Integer, nullable=False, default=0)
    marks = Column(Float, nullable=False)
    image_url = Column(String, nullable=True)  # opaque blob-store path
    correct_answer = Column(Float, nullable=True)  # NUMERICAL
    tolerance = Column(Float, nullable=True)  # NUMERICAL
    keywords = Column(JSONType, nullable=True)  # DESCRIPTIVE
    threshold = Column(Float, nullable=True)  # DESCRIPTIVE, percentage
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    quiz = relationship("Quiz", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Option.id",
    )
    answers = relationship("Answer", back_populates="question", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def correct_option_ids(self):
        return {option.id for option in self.options if option.is_correct}


class Option(Base):
    __tablename__ = "options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(String, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("Question", back_populates="options")
