"""SQLAlchemy database models for tests, answer sheets and results."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base


class Test(Base):
    """Multiple-choice test definition."""

    __tablename__ = "tests"

    id = Column(Integer, primary_key=True, index=True)
    test_code = Column(String(16), unique=True, index=True, nullable=False)
    subject = Column(String(255), nullable=False)
    instruction = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    passages = relationship(
        "Passage",
        back_populates="test",
        cascade="all, delete-orphan",
        order_by="Passage.position",
    )
    questions = relationship(
        "Question",
        back_populates="test",
        cascade="all, delete-orphan",
        order_by="Question.position",
    )
    answer_sheets = relationship("AnswerSheet", back_populates="test")


class Passage(Base):
    """Reading passage shared by several questions of a test."""

    __tablename__ = "passages"

    id = Column(Integer, primary_key=True, index=True)
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    content = Column(Text, nullable=False, default="")
    image_url = Column(String(500), nullable=False, default="")

    test = relationship("Test", back_populates="passages")


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    question_text = Column(Text, nullable=False, default="")
    question_image_url = Column(String(500), nullable=False, default="")
    passage_index = Column(Integer, nullable=False, default=-1)  # -1: no passage

    test = relationship("Test", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="Option.position",
    )

    __table_args__ = (
        Index("idx_questions_test_position", "test_id", "position"),
    )


class Option(Base):
    __tablename__ = "options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False, default="")
    image_url = Column(String(500), nullable=False, default="")
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("Question", back_populates="options")


class AnswerSheet(Base):
    """One learner submission for one test attempt. Never updated."""

    __tablename__ = "answer_sheets"

    id = Column(Integer, primary_key=True, index=True)
    uli = Column(String(50), nullable=False, index=True)
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="SET NULL"), nullable=True)
    date = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Examinee profile captured on the sheet
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    middle_initial = Column(String(10), nullable=True)
    sex = Column(String(10), nullable=True)
    civil_status = Column(String(50), nullable=True)
    highest_educational_attainment = Column(String(100), nullable=True)
    contact_number = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    school = Column(String(255), nullable=True)
    qualifications = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    test = relationship("Test", back_populates="answer_sheets")
    answers = relationship(
        "SheetAnswer",
        back_populates="sheet",
        cascade="all, delete-orphan",
        order_by="SheetAnswer.position",
    )


class SheetAnswer(Base):
    """Selected option for one question of an answer sheet.

    question_id / selected_option_id are plain ids, not foreign keys: a test
    edited after submission must not break the stored sheet.
    """

    __tablename__ = "sheet_answers"

    id = Column(Integer, primary_key=True, index=True)
    sheet_id = Column(Integer, ForeignKey("answer_sheets.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    question_id = Column(Integer, nullable=False)
    selected_option_id = Column(Integer, nullable=False)

    sheet = relationship("AnswerSheet", back_populates="answers")


class Result(Base):
    """Scored result, at most one per learner per test."""

    __tablename__ = "results"

    id = Column(Integer, primary_key=True, index=True)
    uli = Column(String(50), nullable=False, index=True)
    # NULL once the test is deleted; orphaned rows fall outside uq_result_uli_test
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="SET NULL"), nullable=True)
    test_code = Column(String(16), nullable=False)
    subject = Column(String(255), nullable=True)
    score = Column(Integer, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False, default=0)
    remarks = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("uli", "test_id", name="uq_result_uli_test"),
        Index("idx_results_uli_code", "uli", "test_code"),
    )


class TestSession(Base):
    """Timed sitting of a learner on a test."""

    __tablename__ = "test_sessions"

    id = Column(Integer, primary_key=True, index=True)
    uli = Column(String(50), nullable=False, index=True)
    test_id = Column(Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False)
    test_code = Column(String(16), nullable=False)
    start_time = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_time = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="in-progress")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ArchivedRecord(Base):
    """Snapshot of a deleted entity."""

    __tablename__ = "archived_records"

    id = Column(Integer, primary_key=True, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(255), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    deleted_by = Column(String(255), nullable=True)
    deleted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_archive_entity", "entity_type", "entity_id"),
    )
