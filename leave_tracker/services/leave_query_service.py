"""
Leave query engine - read-only filtered listings.

Results keep store order within an employee and directory order across a
manager's reports, so identical data always lists identically.
"""
from typing import Callable, Iterable, List

from leave_tracker.models.leave import LeaveState
from leave_tracker.schemas.leave import LeaveRecord
from leave_tracker.services.directory_service import Directory
from leave_tracker.services.leave_store import LeaveStore


def _only(records: Iterable[LeaveRecord], predicate: Callable[[LeaveRecord], bool]) -> List[LeaveRecord]:
    return [r for r in records if predicate(r)]


class LeaveQueryEngine:
    def __init__(self, store: LeaveStore, directory: Directory):
        self.store = store
        self.directory = directory

    def list_all(self) -> List[LeaveRecord]:
        return self.store.list_all()

    def list_by_active(self, active: bool) -> List[LeaveRecord]:
        return _only(self.store.list_all(), lambda r: r.active_flag == active)

    def list_by_employee(self, employee_id: int) -> List[LeaveRecord]:
        return self.store.list_by_employee(employee_id)

    def list_by_employee_and_decision(self, employee_id: int, accepted: bool) -> List[LeaveRecord]:
        """Decided leaves only; PENDING ones appear in neither the accepted nor the rejected view"""
        wanted = LeaveState.from_flags(active=False, accepted=accepted)
        return _only(self.store.list_by_employee(employee_id), lambda r: r.state is wanted)

    def list_by_employee_and_active(self, employee_id: int, active: bool) -> List[LeaveRecord]:
        """The inactive view mixes ACCEPTED and REJECTED leaves"""
        return _only(self.store.list_by_employee(employee_id), lambda r: r.active_flag == active)

    def list_by_manager(self, manager_id: int) -> List[LeaveRecord]:
        """
        All leaves of a manager's direct reports.

        Raises:
            ManagerNotFound: If the directory does not know the manager
        """
        records: List[LeaveRecord] = []
        for employee_id in self.directory.reports_of(manager_id):
            records.extend(self.store.list_by_employee(employee_id))
        return records

    def list_by_manager_and_status(self, manager_id: int, state: LeaveState) -> List[LeaveRecord]:
        return _only(self.list_by_manager(manager_id), lambda r: r.state is state)
