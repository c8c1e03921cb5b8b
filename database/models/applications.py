"""
Application Models

Submitted applications and their answers. An answer carries free text, a
selected option, or both; never neither.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    Text,
    CheckConstraint,
)
from database.engine import Base, TimestampMixin
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.jobs import Job, Question, QuestionOption


class Application(TimestampMixin, Base):
    """A candidate's submission to a job."""

    __tablename__ = "applications"

    job_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Stored file name of the uploaded resume, if any
    resume_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    job: Mapped["Job"] = relationship(back_populates="applications")
    answers: Mapped[list["Answer"]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Answer(TimestampMixin, Base):
    __tablename__ = "answers"

    application_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    text_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    question_option_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("question_options.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    application: Mapped["Application"] = relationship(back_populates="answers")
    question: Mapped["Question"] = relationship(back_populates="answers")
    question_option: Mapped["QuestionOption | None"] = relationship(back_populates="answers")

    __table_args__ = (
        CheckConstraint(
            "text_value IS NOT NULL OR question_option_id IS NOT NULL",
            name="ck_answers_text_or_option",
        ),
    )
