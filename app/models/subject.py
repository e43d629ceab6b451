from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import COEnum
from app.models.question import JSONType

class Subject(Base):
    __tablename__ = "subjects"

    code = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    teacher = relationship("User")
    co_mapping = relationship("COMapping", back_populates="subject", uselist=False, cascade="all, delete-orphan")
    sheets = relationship("ScoreSheet", back_populates="subject", cascade="all, delete-orphan")


class COMapping(Base):
    __tablename__ = "co_mappings"

    id = Column(Integer, primary_key=True, index=True)
    subject_code = Column(String, ForeignKey("subjects.code", ondelete="CASCADE"), unique=True, nullable=False)
    mst1_q1 = Column(Enum(COEnum), nullable=False)
    mst1_q2 = Column(Enum(COEnum), nullable=False)
    mst1_q3 = Column(Enum(COEnum), nullable=False)
    mst2_q1 = Column(Enum(COEnum), nullable=False)
    mst2_q2 = Column(Enum(COEnum), nullable=False)
    mst2_q3 = Column(Enum(COEnum), nullable=False)
    quiz_assignment = Column(JSONType, nullable=False, default=list)  # list of CO names
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    subject = relationship("Subject", back_populates="co_mapping")


class ScoreSheet(Base):
    __tablename__ = "score_sheets"

    enrollment_number = Column(String, primary_key=True)
    subject_code = Column(String, ForeignKey("subjects.code", ondelete="CASCADE"), primary_key=True)
    name = Column(String, nullable=False)
    mst1_q1 = Column(Float, nullable=True)
    mst1_q2 = Column(Float, nullable=True)
    mst1_q3 = Column(Float, nullable=True)
    mst2_q1 = Column(Float, nullable=True)
    mst2_q2 = Column(Float, nullable=True)
    mst2_q3 = Column(Float, nullable=True)
    quiz_assignment = Column(Float, nullable=True)
    end_sem_q1 = Column(Float, nullable=True)
    end_sem_q2 = Column(Float, nullable=True)
    end_sem_q3 = Column(Float, nullable=True)
    end_sem_q4 = Column(Float, nullable=True)
    end_sem_q5 = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    subject = relationship("Subject", back_populates="sheets")
