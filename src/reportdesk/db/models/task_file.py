import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reportdesk.db.session import Base, TimestampMixin, UUIDPrimaryKey
from reportdesk.domain.enums import FileStatus


class ReportTaskFile(UUIDPrimaryKey, TimestampMixin, Base):
    """An output artifact of a report task, produced by the conversion pipeline."""

    __tablename__ = "report_6406_task_files"

    task_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("report_6406_tasks.id", ondelete="CASCADE"), index=True)
    file_name: Mapped[str] = mapped_column(String(255))
    file_size: Mapped[int] = mapped_column(BigInteger, default=0)
    file_type: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20), default=FileStatus.PENDING.value, index=True)
    storage_url: Mapped[str] = mapped_column(Text)
    download_url: Mapped[Optional[str]] = mapped_column(Text, default=None)
    download_url_expires_at: Mapped[Optional[datetime]] = mapped_column(default=None)
    error_message: Mapped[Optional[str]] = mapped_column(Text, default=None)
