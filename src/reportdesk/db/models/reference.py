"""Reference data: branches and data sources."""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from reportdesk.db.session import Base, TimestampMixin, UUIDPrimaryKey


class Branch(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "branches"

    code: Mapped[str] = mapped_column(String(20), unique=True)
    name: Mapped[str] = mapped_column(String(255))


class Source(TimestampMixin, Base):
    """Data source a report is built from, keyed by its short code."""

    __tablename__ = "sources"

    code: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    ris: Mapped[Optional[str]] = mapped_column(String(255), default=None)
