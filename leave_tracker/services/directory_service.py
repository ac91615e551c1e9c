"""
Reporting directory - resolves a manager to their direct reports.
"""
from typing import Dict, Iterable, List, Protocol

from sqlalchemy.orm import Session

from leave_tracker.core.exceptions import ManagerNotFound
from leave_tracker.models.employee import Employee


class Directory(Protocol):
    def reports_of(self, manager_id: int) -> List[int]: ...


class InMemoryDirectory:
    """
    Static manager -> reports mapping.

    A manager listed with an empty sequence is known but has no reports;
    only ids missing from the mapping raise ManagerNotFound.
    """

    def __init__(self, reports: Dict[int, Iterable[int]]):
        self._reports = {manager_id: list(ids) for manager_id, ids in reports.items()}

    def reports_of(self, manager_id: int) -> List[int]:
        if manager_id not in self._reports:
            raise ManagerNotFound(manager_id)
        return list(self._reports[manager_id])


class SqlDirectory:
    """Directory backed by employees.reporting_manager_id"""

    def __init__(self, db: Session):
        self.db = db

    def reports_of(self, manager_id: int) -> List[int]:
        """
        Direct (not transitive) active reports of a manager, ordered by id.

        Args:
            manager_id: ID of the manager

        Returns:
            List of employee IDs; empty for a known manager without reports

        Raises:
            ManagerNotFound: If no employee has this id
        """
        manager = self.db.query(Employee.id).filter(Employee.id == manager_id).first()
        if manager is None:
            raise ManagerNotFound(manager_id)

        direct_reports = (
            self.db.query(Employee.id)
            .filter(
                Employee.reporting_manager_id == manager_id,
                Employee.active == True,  # noqa: E712
            )
            .order_by(Employee.id.asc())
            .all()
        )
        return [employee_id for (employee_id,) in direct_reports]
