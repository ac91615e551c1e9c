"""
Leave service - the operation set consumed by the HTTP layer.

Wires the lifecycle and query engines to a store, a ledger and a directory.
When built on a SQLAlchemy session every mutating call is one transaction:
committed on success, rolled back on any error. The record lock is held
until the commit finishes.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session

from leave_tracker.core.config import settings
from leave_tracker.core.exceptions import LeaveError, LeaveNotFound
from leave_tracker.models.leave import LeaveState
from leave_tracker.schemas.leave import LeaveRecord, LeavePatch, LeaveSubmission
from leave_tracker.services.directory_service import Directory, SqlDirectory
from leave_tracker.services.leave_query_service import LeaveQueryEngine
from leave_tracker.services.leave_store import LeaveStore, SqlLeaveStore
from leave_tracker.services.leave_wallet_service import BalanceLedger, SqlBalanceLedger
from leave_tracker.services.lifecycle_service import LeaveLifecycle, RecordLockRegistry

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(
        self,
        store: LeaveStore,
        ledger: BalanceLedger,
        directory: Directory,
        locks: Optional[RecordLockRegistry] = None,
        db: Optional[Session] = None,
    ):
        self.store = store
        self.ledger = ledger
        self.directory = directory
        self.lifecycle = LeaveLifecycle(store, ledger, locks)
        self.queries = LeaveQueryEngine(store, directory)
        self.db = db

    @contextmanager
    def _unit_of_work(self, action: str) -> Iterator[None]:
        try:
            yield
        except LeaveError as e:
            if self.db is not None:
                self.db.rollback()
            logger.info("leave %s rejected: %s", action, e.message)
            raise
        except Exception:
            if self.db is not None:
                self.db.rollback()
            logger.exception("leave %s failed", action)
            raise
        else:
            if self.db is not None:
                self.db.commit()

    # --- queries ---

    def list_all(self) -> List[LeaveRecord]:
        return self.queries.list_all()

    def list_by_active(self, active: bool) -> List[LeaveRecord]:
        return self.queries.list_by_active(active)

    def list_by_employee(self, employee_id: int) -> List[LeaveRecord]:
        return self.queries.list_by_employee(employee_id)

    def list_by_employee_and_decision(self, employee_id: int, accepted: bool) -> List[LeaveRecord]:
        return self.queries.list_by_employee_and_decision(employee_id, accepted)

    def list_by_employee_and_active(self, employee_id: int, active: bool) -> List[LeaveRecord]:
        return self.queries.list_by_employee_and_active(employee_id, active)

    def list_by_manager(self, manager_id: int) -> List[LeaveRecord]:
        return self.queries.list_by_manager(manager_id)

    def list_by_manager_and_status(self, manager_id: int, state: LeaveState) -> List[LeaveRecord]:
        return self.queries.list_by_manager_and_status(manager_id, state)

    def list_by_manager_and_flags(
        self,
        manager_id: int,
        active_flag: bool,
        accepted_flag: bool,
    ) -> List[LeaveRecord]:
        """Legacy two-flag form of list_by_manager_and_status"""
        return self.queries.list_by_manager_and_status(
            manager_id, LeaveState.from_flags(active_flag, accepted_flag)
        )

    def get(self, leave_id: int) -> LeaveRecord:
        record = self.store.get(leave_id)
        if record is None:
            raise LeaveNotFound(leave_id)
        return record

    # --- commands ---

    def submit(self, submission: LeaveSubmission) -> LeaveRecord:
        with self._unit_of_work("submit"):
            return self.lifecycle.submit(submission)

    def decide(
        self,
        leave_id: int,
        accepted: bool,
        expected_version: Optional[int] = None,
    ) -> LeaveRecord:
        with self.lifecycle.locks.hold(leave_id), self._unit_of_work("decide"):
            return self.lifecycle.decide(leave_id, accepted, expected_version)

    def update_fields(
        self,
        leave_id: int,
        patch: LeavePatch,
        employee_id: Optional[int] = None,
        expected_version: Optional[int] = None,
    ) -> LeaveRecord:
        with self.lifecycle.locks.hold(leave_id), self._unit_of_work("update"):
            return self.lifecycle.update_fields(leave_id, patch, employee_id, expected_version)

    def delete(self, leave_id: int) -> LeaveRecord:
        with self.lifecycle.locks.hold(leave_id), self._unit_of_work("delete"):
            return self.lifecycle.delete(leave_id)


def build_leave_service(db: Session) -> LeaveService:
    """Leave service over the SQL store, ledger and directory sharing one session"""
    return LeaveService(
        store=SqlLeaveStore(db),
        ledger=SqlBalanceLedger(db, default_balance=settings.DEFAULT_LEAVE_BALANCE),
        directory=SqlDirectory(db),
        db=db,
    )
