from enum import Enum


class PackageStatus(str, Enum):
    """Report package states; the ``pack_`` values are stored as-is."""

    CREATE = "pack_create"
    TRANSFER = "pack_transfer"
    DONE = "pack_done"
    FAIL = "pack_fail"
    CANCEL = "pack_cancel"
    DELETE = "pack_delete"
