"""Report task status model: per-status permissions and transition rules."""

from typing import Literal

from pydantic import BaseModel

from reportdesk.domain.enums import TaskStatus
from reportdesk.domain.errors import ConflictError

TaskAction = Literal["cancel", "delete", "start"]


class StatusPermissions(BaseModel):
    is_end_dapp: bool = False
    is_end_fc: bool = False
    can_cancel: bool = False
    can_delete: bool = False
    can_start: bool = False
    display_name: str


_P = StatusPermissions

STATUS_PERMISSIONS: dict[TaskStatus, StatusPermissions] = {
    TaskStatus.UPLOAD_GENERATION: _P(can_cancel=True, display_name="Upload generation"),
    TaskStatus.REGISTERED: _P(can_cancel=True, display_name="Task registered"),
    TaskStatus.FAILED: _P(is_end_dapp=True, can_delete=True, display_name="Upload generation failed"),
    TaskStatus.UPLOAD_NOT_FORMED: _P(is_end_dapp=True, can_delete=True, display_name="Upload not formed"),
    TaskStatus.UPLOAD_FORMED: _P(is_end_dapp=True, can_cancel=True, display_name="Upload formed"),
    TaskStatus.ACCEPTED_DAPP: _P(can_cancel=True, display_name="Accepted for execution"),
    TaskStatus.SUBMITTED_DAPP: _P(can_cancel=True, display_name="Queued for execution"),
    TaskStatus.KILLED_DAPP: _P(is_end_dapp=True, can_delete=True, display_name="Cancelled"),
    TaskStatus.NEW_DAPP: _P(can_cancel=True, display_name="Task accepted by DAPP"),
    TaskStatus.SAVING_DAPP: _P(can_cancel=True, display_name="Task saved"),
    TaskStatus.CREATED: _P(can_delete=True, can_start=True, display_name="Report created"),
    TaskStatus.DELETED: _P(display_name="Report deleted"),
    TaskStatus.STARTED: _P(can_cancel=True, display_name="Report started"),
    TaskStatus.START_FAILED: _P(can_delete=True, display_name="Report start failed"),
    TaskStatus.CONVERTING: _P(can_cancel=True, display_name="Report converting"),
    TaskStatus.COMPLETED: _P(is_end_fc=True, can_delete=True, display_name="Report completed"),
    TaskStatus.CONVERT_STOPPED: _P(can_delete=True, display_name="Conversion stopped"),
    TaskStatus.IN_QUEUE: _P(is_end_fc=True, can_cancel=True, display_name="Files queued for conversion"),
    TaskStatus.FILE_SUCCESS_NOT_EXIST: _P(is_end_fc=True, can_delete=True, display_name="_SUCCESS file missing"),
    TaskStatus.FAILED_FC: _P(is_end_fc=True, can_delete=True, display_name="File conversion failed"),
    TaskStatus.HAVE_BROKEN_FILES: _P(is_end_fc=True, can_delete=True, display_name="Some files failed to convert"),
}

# Statuses that accept no further transition: neither startable nor cancellable.
TERMINAL_STATUSES: frozenset[TaskStatus] = frozenset(
    status for status, perms in STATUS_PERMISSIONS.items() if not perms.can_cancel and not perms.can_start
)

# Statuses that stamp completed_at when entered.
FINISHING_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.KILLED_DAPP}
)


def get_permissions(status: TaskStatus | str) -> StatusPermissions:
    return STATUS_PERMISSIONS[TaskStatus(status)]


def can_perform(status: TaskStatus | str, action: TaskAction) -> bool:
    perms = get_permissions(status)
    if action == "cancel":
        return perms.can_cancel
    if action == "delete":
        return perms.can_delete
    return perms.can_start


def is_terminal(status: TaskStatus | str) -> bool:
    return TaskStatus(status) in TERMINAL_STATUSES


def check_transition(current: TaskStatus | str, target: TaskStatus | str) -> None:
    """Raise ConflictError if ``current -> target`` is not a permitted transition."""
    current = TaskStatus(current)
    target = TaskStatus(target)

    if target == TaskStatus.STARTED and not can_perform(current, "start"):
        raise ConflictError(f"Cannot start task in {current.value} status")
    if target == TaskStatus.KILLED_DAPP and not can_perform(current, "cancel"):
        raise ConflictError(f"Cannot cancel task in {current.value} status")
    if is_terminal(current):
        raise ConflictError(f"Task in {current.value} status is final")
    if target == current:
        raise ConflictError(f"Task is already in {current.value} status")
    if target in (TaskStatus.CREATED, TaskStatus.DELETED):
        raise ConflictError(f"Cannot move task to {target.value} status")
    if current == TaskStatus.CREATED and target != TaskStatus.STARTED:
        raise ConflictError(f"Task in created status can only be started, not moved to {target.value}")
