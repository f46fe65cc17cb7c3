from enum import Enum


class QueueOperationType(str, Enum):
    """Deferred YouTrack mutation kinds."""

    CREATE_ISSUE = "create_issue"
    LINK_ISSUE = "link_issue"
    UNLINK_ISSUE = "unlink_issue"


class QueueOperationStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
