"""Report-6406 tasks and their append-only status history."""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import JSON, BigInteger, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from reportdesk.db.session import Base, CreatedAtMixin, TimestampMixin, UUIDPrimaryKey, utcnow
from reportdesk.domain.enums import TaskStatus
from reportdesk.domain.models.history import Metadata


class ReportTask(UUIDPrimaryKey, TimestampMixin, Base):
    """A single report generation request (branch, period, format)."""

    __tablename__ = "report_6406_tasks"
    __table_args__ = (
        Index("ix_report_6406_tasks_status", "status"),
        Index("ix_report_6406_tasks_period_start", "period_start"),
    )

    created_by: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    branch_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("branches.id"), index=True)
    branch_name: Mapped[str] = mapped_column(String(255))
    period_start: Mapped[date]
    period_end: Mapped[date]
    account_mask: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    account_second_order: Mapped[Optional[str]] = mapped_column(String(2), default=None)
    currency: Mapped[str] = mapped_column(String(10))
    format: Mapped[str] = mapped_column(String(10))
    report_type: Mapped[str] = mapped_column(String(20))
    source: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    status: Mapped[str] = mapped_column(String(30), default=TaskStatus.CREATED.value)
    file_size: Mapped[Optional[int]] = mapped_column(BigInteger, default=None)  # bytes, unknown until done
    files_count: Mapped[int] = mapped_column(Integer, default=0)
    file_url: Mapped[Optional[str]] = mapped_column(Text, default=None)
    error_message: Mapped[Optional[str]] = mapped_column(Text, default=None)
    last_status_changed_at: Mapped[datetime] = mapped_column(default=utcnow)
    started_at: Mapped[Optional[datetime]] = mapped_column(default=None)
    completed_at: Mapped[Optional[datetime]] = mapped_column(default=None)


class TaskStatusHistory(UUIDPrimaryKey, CreatedAtMixin, Base):
    """One status change. Never updated; removed only together with its task."""

    __tablename__ = "report_6406_task_status_history"
    __table_args__ = (UniqueConstraint("task_id", "sequence", name="uq_report_6406_task_status_history_task_sequence"),)

    task_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("report_6406_tasks.id", ondelete="CASCADE"), index=True)
    status: Mapped[str] = mapped_column(String(30))
    previous_status: Mapped[Optional[str]] = mapped_column(String(30), default=None)
    # 1, 2, 3... per task; orders entries that share a changed_at timestamp
    sequence: Mapped[int] = mapped_column(Integer)
    changed_at: Mapped[datetime] = mapped_column(default=utcnow, index=True)
    changed_by: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    comment: Mapped[Optional[str]] = mapped_column(Text, default=None)
    # "metadata" is reserved on declarative classes
    details: Mapped[Optional[Metadata]] = mapped_column("metadata", JSON, default=None)
