"""Package status transitions."""

from reportdesk.domain.enums import PackageStatus
from reportdesk.domain.errors import ConflictError

# pack_fail, pack_cancel and pack_delete are stored values with no transition into them yet.
PACKAGE_TRANSITIONS: dict[PackageStatus, frozenset[PackageStatus]] = {
    PackageStatus.CREATE: frozenset({PackageStatus.TRANSFER}),
    PackageStatus.TRANSFER: frozenset({PackageStatus.DONE, PackageStatus.FAIL}),
    # A finished or failed copy may be repeated
    PackageStatus.DONE: frozenset({PackageStatus.TRANSFER}),
    PackageStatus.FAIL: frozenset({PackageStatus.TRANSFER}),
}


def check_package_transition(current: PackageStatus | str, target: PackageStatus | str) -> None:
    current = PackageStatus(current)
    target = PackageStatus(target)
    if target not in PACKAGE_TRANSITIONS.get(current, frozenset()):
        raise ConflictError(f"Cannot move package from {current.value} to {target.value}")
