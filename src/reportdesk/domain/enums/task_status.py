from enum import Enum


class TaskStatus(str, Enum):
    """Report task status: DAPP (data application processing) and FC (file conversion) stages."""

    # DAPP
    UPLOAD_GENERATION = "upload_generation"
    REGISTERED = "registered"
    FAILED = "failed"
    UPLOAD_NOT_FORMED = "upload_not_formed"
    UPLOAD_FORMED = "upload_formed"
    ACCEPTED_DAPP = "accepted_dapp"
    SUBMITTED_DAPP = "submitted_dapp"
    KILLED_DAPP = "killed_dapp"
    NEW_DAPP = "new_dapp"
    SAVING_DAPP = "saving_dapp"

    # FC
    CREATED = "created"
    DELETED = "deleted"
    STARTED = "started"
    START_FAILED = "start_failed"
    CONVERTING = "converting"
    COMPLETED = "completed"
    CONVERT_STOPPED = "convert_stopped"
    IN_QUEUE = "in_queue"
    FILE_SUCCESS_NOT_EXIST = "file_success_not_exist"
    FAILED_FC = "failed_fc"
    HAVE_BROKEN_FILES = "have_broken_files"


class FileStatus(str, Enum):
    """Output artifact conversion status."""

    PENDING = "PENDING"
    CONVERTING = "CONVERTING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
