import pytest

from reportdesk.domain.enums import TaskStatus
from reportdesk.domain.errors import ConflictError, ErrorKind
from reportdesk.domain.models.status import (
    STATUS_PERMISSIONS,
    TERMINAL_STATUSES,
    can_perform,
    check_transition,
    get_permissions,
    is_terminal,
)


class TestPermissions:
    def test_every_status_has_permissions(self):
        assert set(STATUS_PERMISSIONS) == set(TaskStatus)

    def test_created_is_the_only_startable_status(self):
        startable = [s for s in TaskStatus if can_perform(s, "start")]
        assert startable == [TaskStatus.CREATED]

    def test_killed_dapp_is_terminal(self):
        perms = get_permissions("killed_dapp")
        assert perms.can_cancel is False
        assert perms.can_delete is True
        assert is_terminal(TaskStatus.KILLED_DAPP)

    @pytest.mark.parametrize("status", [TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.START_FAILED])
    def test_finished_statuses_are_terminal(self, status):
        assert status in TERMINAL_STATUSES

    def test_active_statuses_are_not_terminal(self):
        assert not is_terminal(TaskStatus.CREATED)
        assert not is_terminal(TaskStatus.STARTED)
        assert not is_terminal(TaskStatus.CONVERTING)

    def test_started_cannot_be_deleted(self):
        assert can_perform(TaskStatus.STARTED, "delete") is False


class TestTransitions:
    def test_created_to_started(self):
        check_transition(TaskStatus.CREATED, TaskStatus.STARTED)

    @pytest.mark.parametrize(
        "target", [TaskStatus.COMPLETED, TaskStatus.KILLED_DAPP, TaskStatus.CONVERTING, TaskStatus.FAILED]
    )
    def test_started_to_outcomes(self, target):
        check_transition(TaskStatus.STARTED, target)

    def test_created_only_starts(self):
        with pytest.raises(ConflictError, match="can only be started"):
            check_transition(TaskStatus.CREATED, TaskStatus.COMPLETED)

    def test_start_twice_conflicts(self):
        with pytest.raises(ConflictError, match="Cannot start task in started status"):
            check_transition(TaskStatus.STARTED, TaskStatus.STARTED)

    def test_cancel_completed_conflicts(self):
        with pytest.raises(ConflictError, match="Cannot cancel task in completed status") as exc_info:
            check_transition(TaskStatus.COMPLETED, TaskStatus.KILLED_DAPP)
        assert exc_info.value.kind == ErrorKind.CONFLICT

    def test_terminal_accepts_nothing(self):
        with pytest.raises(ConflictError, match="is final"):
            check_transition(TaskStatus.FAILED, TaskStatus.CONVERTING)

    def test_same_status_conflicts(self):
        with pytest.raises(ConflictError, match="already in converting"):
            check_transition(TaskStatus.CONVERTING, TaskStatus.CONVERTING)

    def test_cannot_move_back_to_created(self):
        with pytest.raises(ConflictError, match="Cannot move task to created"):
            check_transition(TaskStatus.STARTED, TaskStatus.CREATED)

    def test_accepts_plain_strings(self):
        check_transition("started", "completed")
