"""
Position Model

Reusable role definitions (title, level, salary range) that jobs point to.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String

from database.engine import Base, TimestampMixin

if TYPE_CHECKING:
    from database.models.jobs import Job


class Position(TimestampMixin, Base):
    __tablename__ = "positions"

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    level: Mapped[str] = mapped_column(String(50), nullable=False)
    salary_range: Mapped[str] = mapped_column(String(100), nullable=False)

    # Positions referenced by a job cannot be deleted (enforced in the service
    # and by the RESTRICT foreign key)
    jobs: Mapped[list["Job"]] = relationship(
        back_populates="position", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Position {self.title} ({self.level})>"
