"""Report-6406 packages: named groups of tasks copied to TFR together."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from reportdesk.db.session import Base, CreatedAtMixin, TimestampMixin, UUIDPrimaryKey, utcnow
from reportdesk.domain.enums import PackageStatus


class ReportPackage(UUIDPrimaryKey, TimestampMixin, Base):
    __tablename__ = "report_6406_packages"

    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_by: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default=PackageStatus.CREATE.value)
    last_copied_to_tfr_at: Mapped[Optional[datetime]] = mapped_column(default=None)
    # Denormalized from the member tasks; refreshed on every membership change
    tasks_count: Mapped[int] = mapped_column(Integer, default=0)
    total_size: Mapped[int] = mapped_column(BigInteger, default=0)  # bytes


class ReportPackageTask(Base):
    """Package membership. A task may belong to several packages."""

    __tablename__ = "report_6406_package_tasks"

    package_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("report_6406_packages.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    task_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("report_6406_tasks.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    added_at: Mapped[datetime] = mapped_column(default=utcnow)


class PackageStatusHistory(UUIDPrimaryKey, CreatedAtMixin, Base):
    __tablename__ = "report_6406_package_status_history"
    __table_args__ = (
        UniqueConstraint("package_id", "sequence", name="uq_report_6406_package_status_history_package_sequence"),
    )

    package_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("report_6406_packages.id", ondelete="CASCADE"), index=True
    )
    status: Mapped[str] = mapped_column(String(20), index=True)
    previous_status: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    sequence: Mapped[int] = mapped_column(Integer)
    changed_at: Mapped[datetime] = mapped_column(default=utcnow, index=True)
    changed_by: Mapped[str] = mapped_column(String(255))
