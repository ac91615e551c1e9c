"""
Leave record stores

Two implementations of the same contract:
- InMemoryLeaveStore: dict-backed, insertion ordered, thread safe.
- SqlLeaveStore: leave_requests table through a SQLAlchemy session.
  It never commits; the caller owns the transaction.

put() inserts when record.id is None. Otherwise it is a compare-and-set on
version: the stored row must still carry record.version, and the write bumps it.
"""
import itertools
import threading
from typing import Dict, List, Optional, Protocol

from sqlalchemy.orm import Session

from leave_tracker.core.exceptions import LeaveNotFound, LeaveConflict, LeaveValidationError
from leave_tracker.models.employee import Employee
from leave_tracker.models.leave import LeaveRequest
from leave_tracker.schemas.leave import LeaveRecord
from leave_tracker.utils.datetime_utils import ensure_utc

# Columns copied between LeaveRecord and LeaveRequest on write
_WRITABLE_FIELDS = (
    "employee_id",
    "start_date",
    "end_date",
    "requested_days",
    "debited_days",
    "reason",
    "state",
    "created_at",
    "decided_at",
)


class LeaveStore(Protocol):
    def get(self, leave_id: int) -> Optional[LeaveRecord]: ...

    def put(self, record: LeaveRecord) -> LeaveRecord: ...

    def delete(self, leave_id: int) -> bool: ...

    def list_all(self) -> List[LeaveRecord]: ...

    def list_by_employee(self, employee_id: int) -> List[LeaveRecord]: ...


class InMemoryLeaveStore:
    """Process-local store; iteration follows insertion order"""

    def __init__(self, start_id: int = 1):
        self._records: Dict[int, LeaveRecord] = {}
        self._ids = itertools.count(start_id)
        self._lock = threading.Lock()

    def get(self, leave_id: int) -> Optional[LeaveRecord]:
        with self._lock:
            record = self._records.get(leave_id)
            return record.model_copy() if record else None

    def put(self, record: LeaveRecord) -> LeaveRecord:
        with self._lock:
            if record.id is None:
                stored = record.model_copy(update={"id": next(self._ids), "version": 1})
            else:
                current = self._records.get(record.id)
                if current is None:
                    raise LeaveNotFound(record.id)
                if current.version != record.version:
                    raise LeaveConflict(record.id, record.version, current.version)
                stored = record.model_copy(update={"version": record.version + 1})
            self._records[stored.id] = stored
            return stored.model_copy()

    def delete(self, leave_id: int) -> bool:
        with self._lock:
            return self._records.pop(leave_id, None) is not None

    def list_all(self) -> List[LeaveRecord]:
        with self._lock:
            return [r.model_copy() for r in self._records.values()]

    def list_by_employee(self, employee_id: int) -> List[LeaveRecord]:
        with self._lock:
            return [r.model_copy() for r in self._records.values() if r.employee_id == employee_id]


def _to_record(row: LeaveRequest) -> LeaveRecord:
    record = LeaveRecord.model_validate(row)
    # SQLite drops tzinfo on the way back
    record.created_at = ensure_utc(record.created_at)
    record.decided_at = ensure_utc(record.decided_at)
    return record


class SqlLeaveStore:
    """Leave records in the leave_requests table"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, leave_id: int) -> Optional[LeaveRecord]:
        row = self.db.get(LeaveRequest, leave_id, populate_existing=True)
        return _to_record(row) if row else None

    def put(self, record: LeaveRecord) -> LeaveRecord:
        if record.id is None:
            if self.db.get(Employee, record.employee_id) is None:
                raise LeaveValidationError(
                    f"Employee with id {record.employee_id} not found",
                    field="employee_id",
                )
            row = LeaveRequest(version=1, **{f: getattr(record, f) for f in _WRITABLE_FIELDS})
            self.db.add(row)
            self.db.flush()
            return _to_record(row)

        # Lock the row so the version check and the write are one step
        row = self.db.get(LeaveRequest, record.id, with_for_update=True, populate_existing=True)
        if row is None:
            raise LeaveNotFound(record.id)
        if row.version != record.version:
            raise LeaveConflict(record.id, record.version, row.version)
        for field in _WRITABLE_FIELDS:
            setattr(row, field, getattr(record, field))
        row.version = record.version + 1
        self.db.flush()
        return _to_record(row)

    def delete(self, leave_id: int) -> bool:
        row = self.db.get(LeaveRequest, leave_id, with_for_update=True)
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True

    def list_all(self) -> List[LeaveRecord]:
        rows = self.db.query(LeaveRequest).populate_existing().order_by(LeaveRequest.id.asc()).all()
        return [_to_record(r) for r in rows]

    def list_by_employee(self, employee_id: int) -> List[LeaveRecord]:
        rows = (
            self.db.query(LeaveRequest).populate_existing()
            .filter(LeaveRequest.employee_id == employee_id)
            .order_by(LeaveRequest.id.asc())
            .all()
        )
        return [_to_record(r) for r in rows]
