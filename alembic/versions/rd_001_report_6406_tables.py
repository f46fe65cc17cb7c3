"""report_6406_tables

Revision ID: rd_001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "rd_001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "branches",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_branches")),
        sa.UniqueConstraint("code", name=op.f("uq_branches_code")),
    )

    op.create_table(
        "sources",
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("ris", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("code", name=op.f("pk_sources")),
    )

    op.create_table(
        "report_6406_tasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("branch_id", sa.Uuid(), sa.ForeignKey("branches.id", name=op.f("fk_report_6406_tasks_branch_id_branches")), nullable=False),
        sa.Column("branch_name", sa.String(255), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("account_mask", sa.String(20), nullable=True),
        sa.Column("account_second_order", sa.String(2), nullable=True),
        sa.Column("currency", sa.String(10), nullable=False),
        sa.Column("format", sa.String(10), nullable=False),
        sa.Column("report_type", sa.String(20), nullable=False),
        sa.Column("source", sa.String(20), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="created"),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("files_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("file_url", sa.Text(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("last_status_changed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_report_6406_tasks")),
    )
    op.create_index("ix_report_6406_tasks_status", "report_6406_tasks", ["status"])
    op.create_index("ix_report_6406_tasks_period_start", "report_6406_tasks", ["period_start"])
    op.create_index(op.f("ix_report_6406_tasks_branch_id"), "report_6406_tasks", ["branch_id"])

    op.create_table(
        "report_6406_task_status_history",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "task_id",
            sa.Uuid(),
            sa.ForeignKey(
                "report_6406_tasks.id",
                name=op.f("fk_report_6406_task_status_history_task_id_report_6406_tasks"),
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("previous_status", sa.String(30), nullable=True),
        sa.Column("changed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("changed_by", sa.String(255), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_report_6406_task_status_history")),
    )
    op.create_index(op.f("ix_report_6406_task_status_history_task_id"), "report_6406_task_status_history", ["task_id"])
    op.create_index(op.f("ix_report_6406_task_status_history_changed_at"), "report_6406_task_status_history", ["changed_at"])

    op.create_table(
        "report_6406_task_files",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "task_id",
            sa.Uuid(),
            sa.ForeignKey(
                "report_6406_tasks.id",
                name=op.f("fk_report_6406_task_files_task_id_report_6406_tasks"),
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("file_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("storage_url", sa.Text(), nullable=False),
        sa.Column("download_url", sa.Text(), nullable=True),
        sa.Column("download_url_expires_at", sa.DateTime(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_report_6406_task_files")),
    )
    op.create_index(op.f("ix_report_6406_task_files_task_id"), "report_6406_task_files", ["task_id"])
    op.create_index(op.f("ix_report_6406_task_files_status"), "report_6406_task_files", ["status"])


def downgrade() -> None:
    op.drop_table("report_6406_task_files")
    op.drop_table("report_6406_task_status_history")
    op.drop_table("report_6406_tasks")
    op.drop_table("sources")
    op.drop_table("branches")
