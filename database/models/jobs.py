"""
Jobs Module

Job postings, the questions of their application form and the selectable
options of choice questions. Questions and options are owned by their job:
deleting a job removes them through both ORM and foreign-key cascades.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    Integer,
    Text,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, TimestampMixin
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.applications import Answer, Application
    from database.models.positions import Position


# ==================== Job Enums ===================== #
class QuestionType(str, PyEnum):
    """Kinds of questions an application form can ask."""

    SHORT_TEXT = "SHORT_TEXT"
    LONG_TEXT = "LONG_TEXT"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    SINGLE_CHOICE = "SINGLE_CHOICE"


# ==================== Job ===================== #
class Job(TimestampMixin, Base):
    """A job posting, publicly reachable by its slug while active."""

    __tablename__ = "jobs"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    requires_resume: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    position_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("positions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Relationships
    position: Mapped["Position"] = relationship(back_populates="jobs")
    questions: Mapped[list["Question"]] = relationship(
        back_populates="job",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.order",
    )
    applications: Mapped[list["Application"]] = relationship(
        back_populates="job",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Job {self.slug}>"


# ==================== Questions ===================== #
class Question(TimestampMixin, Base):
    """A question on a job's application form."""

    __tablename__ = "questions"

    label: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[QuestionType] = mapped_column(
        SQLEnum(QuestionType, name="question_type"), nullable=False
    )
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    job_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    job: Mapped["Job"] = relationship(back_populates="questions")
    options: Mapped[list["QuestionOption"]] = relationship(
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="QuestionOption.order_index",
    )
    answers: Mapped[list["Answer"]] = relationship(
        back_populates="question", passive_deletes=True
    )

    __table_args__ = (Index("ix_questions_job_order", "job_id", "order"),)


class QuestionOption(TimestampMixin, Base):
    """A selectable choice of a single/multiple choice question."""

    __tablename__ = "question_options"

    label: Mapped[str] = mapped_column(String(200), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    question_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    question: Mapped["Question"] = relationship(back_populates="options")
    answers: Mapped[list["Answer"]] = relationship(
        back_populates="question_option", passive_deletes=True
    )

    __table_args__ = (
        Index("ix_question_options_question_order", "question_id", "order_index"),
    )
