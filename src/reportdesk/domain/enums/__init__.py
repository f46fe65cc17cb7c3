from reportdesk.domain.enums.local_task import LocalTaskPriority, LocalTaskStatus
from reportdesk.domain.enums.package import PackageStatus
from reportdesk.domain.enums.report import Currency, FileFormat, ReportType
from reportdesk.domain.enums.sorting import SortOrder
from reportdesk.domain.enums.task_status import FileStatus, TaskStatus
from reportdesk.domain.enums.user import UserRole
from reportdesk.domain.enums.youtrack import QueueOperationStatus, QueueOperationType

__all__ = [
    "Currency",
    "FileFormat",
    "FileStatus",
    "LocalTaskPriority",
    "LocalTaskStatus",
    "PackageStatus",
    "QueueOperationStatus",
    "QueueOperationType",
    "ReportType",
    "SortOrder",
    "TaskStatus",
    "UserRole",
]
