"""
Tests for leave state transitions and their ledger side effects
"""
from datetime import date
from decimal import Decimal

import pytest
from leave_tracker.core.exceptions import (
    LeaveNotFound,
    InsufficientBalance,
    LeaveValidationError,
    LeaveConflict,
)
from leave_tracker.models.leave import LeaveState
from leave_tracker.schemas.leave import LeavePatch, LeaveSubmission


def _submit(service, employee_id=7, days="5", start=date(2024, 3, 4), end=date(2024, 3, 8)):
    return service.submit(LeaveSubmission(
        employee_id=employee_id,
        start_date=start,
        end_date=end,
        requested_days=Decimal(days),
        reason="Family trip",
    ))


def test_submit_creates_pending_record(service, ledger):
    record = _submit(service)

    assert record.id == 101
    assert record.state is LeaveState.PENDING
    assert record.active_flag is True
    assert record.accepted_flag is False
    assert record.version == 1
    assert record.debited_days == Decimal("0")
    assert record.decided_at is None
    # Submission never touches the ledger
    assert ledger.available(7) == Decimal("10")


def test_submit_rejects_inverted_dates(service, store):
    with pytest.raises(LeaveValidationError) as exc_info:
        _submit(service, start=date(2024, 3, 8), end=date(2024, 3, 4))

    assert exc_info.value.field == "start_date"
    assert store.list_all() == []


@pytest.mark.parametrize("days", ["0", "-1"])
def test_submit_rejects_non_positive_days(service, days):
    with pytest.raises(LeaveValidationError):
        _submit(service, days=days)


def test_single_day_leave_is_valid(service):
    record = _submit(service, days="0.5", start=date(2024, 3, 4), end=date(2024, 3, 4))
    assert record.requested_days == Decimal("0.5")


def test_accept_debits_requested_days(service, ledger):
    record = _submit(service)

    accepted = service.decide(record.id, True)

    assert accepted.state is LeaveState.ACCEPTED
    assert accepted.active_flag is False
    assert accepted.accepted_flag is True
    assert accepted.debited_days == Decimal("5")
    assert accepted.decided_at is not None
    assert ledger.available(7) == Decimal("5")


def test_accept_with_insufficient_balance_changes_nothing(service, ledger):
    record = _submit(service, employee_id=8, days="4")

    with pytest.raises(InsufficientBalance) as exc_info:
        service.decide(record.id, True)

    assert exc_info.value.available == Decimal("3")
    assert ledger.available(8) == Decimal("3")
    unchanged = service.get(record.id)
    assert unchanged.state is LeaveState.PENDING
    assert unchanged.version == record.version


def test_reject_never_touches_balance(service, ledger):
    record = _submit(service)

    rejected = service.decide(record.id, False)

    assert rejected.state is LeaveState.REJECTED
    assert rejected.active_flag is False
    assert rejected.accepted_flag is False
    assert ledger.available(7) == Decimal("10")


def test_accepted_to_rejected_credits_back(service, ledger):
    record = _submit(service, days="4")
    service.decide(record.id, True)
    assert ledger.available(7) == Decimal("6")

    rejected = service.decide(record.id, False)

    assert rejected.state is LeaveState.REJECTED
    assert rejected.debited_days == Decimal("0")
    assert ledger.available(7) == Decimal("10")


def test_rejected_to_accepted_rechecks_balance(service, ledger):
    record = _submit(service, employee_id=8, days="3")
    service.decide(record.id, False)

    # Balance spent elsewhere in the meantime
    ledger.debit(8, Decimal("1"))

    with pytest.raises(InsufficientBalance):
        service.decide(record.id, True)
    assert service.get(record.id).state is LeaveState.REJECTED
    assert ledger.available(8) == Decimal("2")


def test_rejected_to_accepted_debits_again(service, ledger):
    record = _submit(service, days="2")
    service.decide(record.id, False)

    accepted = service.decide(record.id, True)

    assert accepted.state is LeaveState.ACCEPTED
    assert ledger.available(7) == Decimal("8")


def test_repeated_decision_is_a_no_op(service, ledger):
    record = _submit(service, days="2")
    first = service.decide(record.id, True)

    again = service.decide(record.id, True)

    assert again.version == first.version
    assert again.decided_at == first.decided_at
    assert ledger.available(7) == Decimal("8")


def test_decide_missing_leave(service):
    with pytest.raises(LeaveNotFound):
        service.decide(999, True)


def test_stale_version_is_a_conflict(service, ledger):
    record = _submit(service, days="2")
    service.decide(record.id, True, expected_version=record.version)

    with pytest.raises(LeaveConflict) as exc_info:
        service.decide(record.id, False, expected_version=record.version)

    assert exc_info.value.actual_version == record.version + 1
    assert ledger.available(7) == Decimal("8")
    assert service.get(record.id).state is LeaveState.ACCEPTED


def test_update_pending_leave_does_not_touch_balance(service, ledger):
    record = _submit(service)

    updated = service.update_fields(record.id, LeavePatch(requested_days=Decimal("20"), reason="Longer trip"))

    assert updated.requested_days == Decimal("20")
    assert updated.reason == "Longer trip"
    assert updated.state is LeaveState.PENDING
    assert ledger.available(7) == Decimal("10")


def test_update_accepted_leave_downward_credits_difference(service, ledger):
    record = _submit(service)
    service.decide(record.id, True)

    updated = service.update_fields(record.id, LeavePatch(requested_days=Decimal("2")))

    assert updated.debited_days == Decimal("2")
    assert updated.state is LeaveState.ACCEPTED
    assert ledger.available(7) == Decimal("8")


def test_update_accepted_leave_upward_beyond_balance(service, ledger):
    record = _submit(service)
    service.decide(record.id, True)

    with pytest.raises(InsufficientBalance):
        service.update_fields(record.id, LeavePatch(requested_days=Decimal("16")))

    unchanged = service.get(record.id)
    assert unchanged.requested_days == Decimal("5")
    assert ledger.available(7) == Decimal("5")


def test_update_rejects_null_required_field(service):
    record = _submit(service)

    with pytest.raises(LeaveValidationError):
        service.update_fields(record.id, LeavePatch(end_date=None))


def test_update_rejects_inverted_window(service):
    record = _submit(service)

    with pytest.raises(LeaveValidationError):
        service.update_fields(record.id, LeavePatch(end_date=date(2024, 3, 1)))


def test_update_scoped_to_other_employee_is_not_found(service):
    record = _submit(service)

    with pytest.raises(LeaveNotFound):
        service.update_fields(record.id, LeavePatch(reason="hijack"), employee_id=8)
    assert service.get(record.id).reason == "Family trip"


def test_update_missing_leave(service):
    with pytest.raises(LeaveNotFound):
        service.update_fields(999, LeavePatch(reason="x"))


def test_delete_accepted_leave_credits_nothing(service, ledger):
    record = _submit(service, days="4")
    service.decide(record.id, True)

    deleted = service.delete(record.id)

    assert deleted.id == record.id
    assert ledger.available(7) == Decimal("6")
    with pytest.raises(LeaveNotFound):
        service.get(record.id)


@pytest.mark.parametrize("days", ["0.004", "1.125", "1000"])
def test_submit_rejects_days_outside_column_precision(service, store, days):
    with pytest.raises(LeaveValidationError) as exc_info:
        _submit(service, days=days)

    assert exc_info.value.field == "requested_days"
    assert store.list_all() == []


def test_update_rejects_days_outside_column_precision(service, ledger):
    record = _submit(service)
    service.decide(record.id, True)

    with pytest.raises(LeaveValidationError):
        service.update_fields(record.id, LeavePatch(requested_days=Decimal("5.001")))
    assert ledger.available(7) == Decimal("5")


def test_update_rejected_leave_does_not_touch_balance(service, ledger):
    record = _submit(service, days="4")
    service.decide(record.id, True)
    service.decide(record.id, False)
    assert ledger.available(7) == Decimal("10")

    updated = service.update_fields(record.id, LeavePatch(requested_days=Decimal("9")))

    assert updated.state is LeaveState.REJECTED
    assert updated.requested_days == Decimal("9")
    assert updated.debited_days == Decimal("0")
    assert ledger.available(7) == Decimal("10")


def test_date_only_edit_of_accepted_leave_keeps_balance(service, ledger):
    record = _submit(service)
    service.decide(record.id, True)

    updated = service.update_fields(
        record.id,
        LeavePatch(start_date=date(2024, 4, 1), end_date=date(2024, 4, 5)),
    )

    assert updated.start_date == date(2024, 4, 1)
    assert updated.state is LeaveState.ACCEPTED
    assert updated.debited_days == Decimal("5")
    assert ledger.available(7) == Decimal("5")
