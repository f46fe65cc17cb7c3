from reportdesk.db.repos.package_history_repo import PackageHistoryRepo
from reportdesk.db.repos.package_repo import PackageRepo
from reportdesk.db.repos.reference_repo import ReferenceRepo
from reportdesk.db.repos.status_history_repo import StatusHistoryRepo
from reportdesk.db.repos.task_file_repo import TaskFileRepo
from reportdesk.db.repos.task_repo import TaskRepo

__all__ = [
    "PackageHistoryRepo",
    "PackageRepo",
    "ReferenceRepo",
    "StatusHistoryRepo",
    "TaskFileRepo",
    "TaskRepo",
]
