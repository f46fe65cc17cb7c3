"""history_sequence_and_packages

Revision ID: rd_002
Revises: rd_001
Create Date: 2026-10-19 15:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "rd_002"
down_revision: Union[str, Sequence[str], None] = "rd_001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("report_6406_task_status_history", sa.Column("sequence", sa.Integer(), nullable=True))
    # Number existing entries per task in changed_at order
    op.execute(
        """
        UPDATE report_6406_task_status_history AS h
        SET sequence = numbered.rn
        FROM (
            SELECT id, row_number() OVER (PARTITION BY task_id ORDER BY changed_at, created_at, id) AS rn
            FROM report_6406_task_status_history
        ) AS numbered
        WHERE h.id = numbered.id
        """
    )
    op.alter_column("report_6406_task_status_history", "sequence", nullable=False)
    op.create_unique_constraint(
        "uq_report_6406_task_status_history_task_sequence",
        "report_6406_task_status_history",
        ["task_id", "sequence"],
    )

    op.create_table(
        "report_6406_packages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pack_create"),
        sa.Column("last_copied_to_tfr_at", sa.DateTime(), nullable=True),
        sa.Column("tasks_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_size", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_report_6406_packages")),
    )
    op.create_index(op.f("ix_report_6406_packages_name"), "report_6406_packages", ["name"], unique=True)

    op.create_table(
        "report_6406_package_tasks",
        sa.Column(
            "package_id",
            sa.Uuid(),
            sa.ForeignKey(
                "report_6406_packages.id",
                name=op.f("fk_report_6406_package_tasks_package_id_report_6406_packages"),
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column(
            "task_id",
            sa.Uuid(),
            sa.ForeignKey(
                "report_6406_tasks.id",
                name=op.f("fk_report_6406_package_tasks_task_id_report_6406_tasks"),
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("added_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("package_id", "task_id", name=op.f("pk_report_6406_package_tasks")),
    )
    op.create_index(op.f("ix_report_6406_package_tasks_package_id"), "report_6406_package_tasks", ["package_id"])
    op.create_index(op.f("ix_report_6406_package_tasks_task_id"), "report_6406_package_tasks", ["task_id"])

    op.create_table(
        "report_6406_package_status_history",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "package_id",
            sa.Uuid(),
            sa.ForeignKey(
                "report_6406_packages.id",
                name=op.f("fk_report_6406_package_status_history_package_id_report_6406_packages"),
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("previous_status", sa.String(20), nullable=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("changed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("changed_by", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_report_6406_package_status_history")),
        sa.UniqueConstraint(
            "package_id", "sequence", name="uq_report_6406_package_status_history_package_sequence"
        ),
    )
    op.create_index(
        op.f("ix_report_6406_package_status_history_package_id"),
        "report_6406_package_status_history",
        ["package_id"],
    )
    op.create_index(
        op.f("ix_report_6406_package_status_history_status"), "report_6406_package_status_history", ["status"]
    )
    op.create_index(
        op.f("ix_report_6406_package_status_history_changed_at"),
        "report_6406_package_status_history",
        ["changed_at"],
    )


def downgrade() -> None:
    op.drop_table("report_6406_package_status_history")
    op.drop_table("report_6406_package_tasks")
    op.drop_table("report_6406_packages")
    op.drop_constraint(
        "uq_report_6406_task_status_history_task_sequence", "report_6406_task_status_history", type_="unique"
    )
    op.drop_column("report_6406_task_status_history", "sequence")
