"""
Leave lifecycle engine - state transitions and their ledger side effects.

    PENDING --decide(accepted)--> ACCEPTED   (debit requested_days)
    PENDING --decide(rejected)--> REJECTED   (no ledger call)
    ACCEPTED <--------------------> REJECTED (credit back / re-check and debit)

Every mutating call holds the per-record lock for its whole read/check/write
sequence. The ledger is moved before the record is written; if the write
fails the movement is reversed before the error propagates.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Dict, Iterator, Optional

from leave_tracker.core.exceptions import (
    LeaveNotFound,
    LeaveConflict,
    InsufficientBalance,
    LeaveValidationError,
)
from leave_tracker.models.leave import LeaveState
from leave_tracker.schemas.leave import LeaveRecord, LeavePatch, LeaveSubmission
from leave_tracker.services.leave_store import LeaveStore
from leave_tracker.services.leave_wallet_service import BalanceLedger
from leave_tracker.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
# leave_requests.requested_days is NUMERIC(5, 2)
DAY_PRECISION = Decimal("0.01")
MAX_REQUESTED_DAYS = Decimal("999.99")

# Fields of a leave that may never be patched to null
_REQUIRED_PATCH_FIELDS = ("start_date", "end_date", "requested_days")


class RecordLockRegistry:
    """
    One re-entrant lock per leave id.

    Calls on the same id serialize; calls on different ids only share the
    registry guard for the instant it takes to look a lock up. Re-entry lets
    a caller keep the lock across its commit while the engine takes it again.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.RLock] = {}

    @contextmanager
    def hold(self, leave_id: int) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(leave_id, threading.RLock())
        with lock:
            yield

    def discard(self, leave_id: int) -> None:
        with self._guard:
            self._locks.pop(leave_id, None)


# Shared by every engine in the process so that request-scoped services
# still serialize on the same record.
record_locks = RecordLockRegistry()


def validate_leave_window(start_date: date, end_date: date, requested_days: Decimal) -> None:
    """
    Validate the date range and day count of a leave.

    Raises:
        LeaveValidationError: start_date after end_date, requested_days <= 0,
            or requested_days not storable as NUMERIC(5, 2)
    """
    if start_date > end_date:
        raise LeaveValidationError(
            "start_date must be less than or equal to end_date",
            field="start_date",
        )
    days = None if requested_days is None else Decimal(str(requested_days))
    if days is None or days <= ZERO:
        raise LeaveValidationError(
            f"requested_days must be greater than 0, got {requested_days}",
            field="requested_days",
        )
    if days > MAX_REQUESTED_DAYS or days != days.quantize(DAY_PRECISION):
        raise LeaveValidationError(
            f"requested_days must have at most 2 decimal places and not exceed "
            f"{MAX_REQUESTED_DAYS}, got {requested_days}",
            field="requested_days",
        )


class LeaveLifecycle:
    """Applies submissions, decisions, corrections and deletions to the store"""

    def __init__(
        self,
        store: LeaveStore,
        ledger: BalanceLedger,
        locks: Optional[RecordLockRegistry] = None,
    ):
        self.store = store
        self.ledger = ledger
        self.locks = locks or record_locks

    def _load(self, leave_id: int, expected_version: Optional[int]) -> LeaveRecord:
        record = self.store.get(leave_id)
        if record is None:
            raise LeaveNotFound(leave_id)
        if expected_version is not None and record.version != expected_version:
            raise LeaveConflict(leave_id, expected_version, record.version)
        return record

    def _require_balance(self, employee_id: int, days: Decimal) -> None:
        available = self.ledger.available(employee_id)
        if available < days:
            raise InsufficientBalance(employee_id, days, available)

    def _write(self, record: LeaveRecord, ledger_delta: Decimal) -> LeaveRecord:
        """
        Persist record after the ledger has already moved by ledger_delta
        (negative = debited). On failure the ledger movement is undone.
        """
        try:
            return self.store.put(record)
        except Exception:
            if ledger_delta < ZERO:
                self.ledger.credit(record.employee_id, -ledger_delta)
            elif ledger_delta > ZERO:
                self.ledger.debit(record.employee_id, ledger_delta)
            raise

    def submit(self, submission: LeaveSubmission) -> LeaveRecord:
        """
        Store a new PENDING leave. No ledger interaction happens until acceptance.

        Raises:
            LeaveValidationError: If the window or day count is invalid
        """
        validate_leave_window(submission.start_date, submission.end_date, submission.requested_days)
        record = LeaveRecord(
            employee_id=submission.employee_id,
            start_date=submission.start_date,
            end_date=submission.end_date,
            requested_days=Decimal(str(submission.requested_days)),
            reason=submission.reason,
            state=LeaveState.PENDING,
            debited_days=ZERO,
            created_at=now_utc(),
        )
        stored = self.store.put(record)
        logger.info(
            "leave submitted: leave_request_id=%s employee_id=%s days=%s",
            stored.id, stored.employee_id, stored.requested_days,
        )
        return stored

    def decide(
        self,
        leave_id: int,
        accepted: bool,
        expected_version: Optional[int] = None,
    ) -> LeaveRecord:
        """
        Accept or reject a leave.

        Args:
            leave_id: ID of the leave to decide
            accepted: True to accept, False to reject
            expected_version: Version the caller last saw; stale values fail

        Returns:
            The stored record after the decision

        Raises:
            LeaveNotFound: If the leave does not exist
            LeaveConflict: If expected_version is stale
            InsufficientBalance: If accepting needs more days than available
        """
        target = LeaveState.ACCEPTED if accepted else LeaveState.REJECTED

        with self.locks.hold(leave_id):
            record = self._load(leave_id, expected_version)
            before = record.state

            if before is target:
                # Same decision again: nothing to debit or credit
                return record

            ledger_delta = ZERO
            if target is LeaveState.ACCEPTED:
                self._require_balance(record.employee_id, record.requested_days)
                self.ledger.debit(record.employee_id, record.requested_days)
                ledger_delta = -record.requested_days
                debited = record.requested_days
            else:
                if record.debited_days > ZERO:
                    self.ledger.credit(record.employee_id, record.debited_days)
                    ledger_delta = record.debited_days
                debited = ZERO

            decided = record.model_copy(update={
                "state": target,
                "debited_days": debited,
                "decided_at": now_utc(),
            })
            stored = self._write(decided, ledger_delta)

        logger.info(
            "leave status transition: leave_request_id=%s before=%s after=%s action=%s",
            leave_id, before.value, target.value, "accept" if accepted else "reject",
        )
        return stored

    def update_fields(
        self,
        leave_id: int,
        patch: LeavePatch,
        employee_id: Optional[int] = None,
        expected_version: Optional[int] = None,
    ) -> LeaveRecord:
        """
        Apply a correction to a leave without changing its state.

        An ACCEPTED leave is re-validated against the ledger for the difference
        between the new requested_days and what is already debited.

        Args:
            leave_id: ID of the leave to update
            patch: Fields to change (unset fields are left alone)
            employee_id: If given, the leave must belong to this employee
            expected_version: Version the caller last saw; stale values fail

        Raises:
            LeaveNotFound: If the leave does not exist (or belongs to someone else)
            LeaveValidationError: If the patched leave is malformed
            InsufficientBalance: If an upward edit exceeds the available days
            LeaveConflict: If expected_version is stale
        """
        changes = patch.model_dump(exclude_unset=True)
        for field in _REQUIRED_PATCH_FIELDS:
            if field in changes and changes[field] is None:
                raise LeaveValidationError(f"{field} cannot be null", field=field)
        if "requested_days" in changes:
            changes["requested_days"] = Decimal(str(changes["requested_days"]))

        with self.locks.hold(leave_id):
            record = self._load(leave_id, expected_version)
            if employee_id is not None and record.employee_id != employee_id:
                raise LeaveNotFound(leave_id)

            updated = record.model_copy(update=changes)
            validate_leave_window(updated.start_date, updated.end_date, updated.requested_days)

            ledger_delta = ZERO
            if record.state is LeaveState.ACCEPTED:
                delta = updated.requested_days - record.debited_days
                if delta > ZERO:
                    self._require_balance(record.employee_id, delta)
                    self.ledger.debit(record.employee_id, delta)
                    ledger_delta = -delta
                elif delta < ZERO:
                    self.ledger.credit(record.employee_id, -delta)
                    ledger_delta = -delta
                updated.debited_days = updated.requested_days
                if delta != ZERO:
                    logger.info(
                        "accepted leave re-validated: leave_request_id=%s delta_days=%s",
                        leave_id, delta,
                    )

            stored = self._write(updated, ledger_delta)

        logger.info(
            "leave updated: leave_request_id=%s fields=%s state=%s",
            leave_id, sorted(changes), stored.state.value,
        )
        return stored

    def delete(self, leave_id: int) -> LeaveRecord:
        """
        Remove a leave in any state. Nothing is credited back.

        Raises:
            LeaveNotFound: If there is nothing to delete
        """
        with self.locks.hold(leave_id):
            record = self.store.get(leave_id)
            if record is None or not self.store.delete(leave_id):
                raise LeaveNotFound(leave_id)
        self.locks.discard(leave_id)
        logger.info(
            "leave deleted: leave_request_id=%s state=%s",
            leave_id, record.state.value,
        )
        return record
