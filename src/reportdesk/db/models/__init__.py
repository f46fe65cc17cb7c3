from reportdesk.db.models.package import PackageStatusHistory, ReportPackage, ReportPackageTask
from reportdesk.db.models.reference import Branch, Source
from reportdesk.db.models.report_task import ReportTask, TaskStatusHistory
from reportdesk.db.models.task_file import ReportTaskFile

__all__ = [
    "Branch",
    "PackageStatusHistory",
    "ReportPackage",
    "ReportPackageTask",
    "ReportTask",
    "ReportTaskFile",
    "Source",
    "TaskStatusHistory",
]
