"""
Admin Model

Back-office accounts that manage jobs and review applications.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Boolean

from database.engine import Base, TimestampMixin


class Admin(TimestampMixin, Base):
    """Admin credentials. Passwords are stored as bcrypt hashes."""

    __tablename__ = "admins"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    is_first_login: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Admin {self.email}>"
