"""
End-to-end scenarios against the in-memory service
"""
from datetime import date
from decimal import Decimal

import pytest
from leave_tracker.core.exceptions import LeaveNotFound, InsufficientBalance
from leave_tracker.models.leave import LeaveState
from leave_tracker.schemas.leave import LeavePatch, LeaveSubmission


def _request(employee_id, days):
    return LeaveSubmission(
        employee_id=employee_id,
        start_date=date(2024, 7, 1),
        end_date=date(2024, 7, 12),
        requested_days=Decimal(days),
    )


def test_accept_then_extend_accepted_leave(service, ledger):
    first = service.submit(_request(7, "5"))
    assert first.id == 101
    assert first.state is LeaveState.PENDING

    accepted = service.decide(101, True)
    assert accepted.state is LeaveState.ACCEPTED
    assert ledger.available(7) == Decimal("5")

    extended = service.update_fields(101, LeavePatch(requested_days=Decimal("8")))
    assert extended.requested_days == Decimal("8")
    assert ledger.available(7) == Decimal("2")


def test_second_request_exceeding_balance_stays_pending(service, ledger):
    service.submit(_request(7, "5"))
    service.decide(101, True)
    service.update_fields(101, LeavePatch(requested_days=Decimal("8")))

    second = service.submit(_request(7, "5"))
    assert second.id == 102

    with pytest.raises(InsufficientBalance):
        service.decide(102, True)

    assert service.get(102).state is LeaveState.PENDING
    assert ledger.available(7) == Decimal("2")


def test_decide_unknown_leave(service):
    with pytest.raises(LeaveNotFound):
        service.decide(999, True)


def test_delete_twice(service):
    service.submit(_request(7, "5"))

    assert service.delete(101).id == 101
    with pytest.raises(LeaveNotFound):
        service.delete(101)


def test_manager_flag_form_matches_status_form(service):
    pending = service.submit(_request(7, "1"))
    accepted = service.submit(_request(8, "1"))
    rejected = service.submit(_request(8, "1"))
    service.decide(accepted.id, True)
    service.decide(rejected.id, False)

    def ids(records):
        return [r.id for r in records]

    assert ids(service.list_by_manager_and_flags(1, True, False)) == [pending.id]
    # acceptedFlag is meaningless while active
    assert ids(service.list_by_manager_and_flags(1, True, True)) == [pending.id]
    assert ids(service.list_by_manager_and_flags(1, False, True)) == [accepted.id]
    assert ids(service.list_by_manager_and_flags(1, False, False)) == [rejected.id]
    assert ids(service.list_by_manager_and_status(1, LeaveState.ACCEPTED)) == [accepted.id]


def test_store_copies_are_detached(service, store):
    record = service.submit(_request(7, "5"))
    record.reason = "edited locally"

    assert store.get(record.id).reason is None
