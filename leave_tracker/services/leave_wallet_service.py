"""
Leave Wallet Service - the balance ledger consulted on every acceptance.

- available(E): days E can still take.
- debit(E, N): take N days; refuses to drive the balance negative.
- credit(E, N): give N days back (rejection of an accepted leave, downward edit).
"""
import logging
import threading
from decimal import Decimal
from typing import Dict, Optional, Protocol

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from leave_tracker.core.exceptions import InsufficientBalance, LeaveValidationError
from leave_tracker.models.employee import Employee
from leave_tracker.models.leave import LeaveBalance

logger = logging.getLogger(__name__)


class BalanceLedger(Protocol):
    def available(self, employee_id: int) -> Decimal: ...

    def debit(self, employee_id: int, days: Decimal) -> None: ...

    def credit(self, employee_id: int, days: Decimal) -> None: ...


def _check_amount(days: Decimal) -> Decimal:
    days = Decimal(str(days))
    if days < 0:
        raise LeaveValidationError(f"Ledger amount must not be negative, got {days}", field="days")
    return days


class InMemoryBalanceLedger:
    """
    Dict-backed ledger. Unknown employees start at default_balance.

    debit() checks and subtracts under one lock, so two concurrent debits
    can never overdraw the same employee.
    """

    def __init__(
        self,
        balances: Optional[Dict[int, Decimal]] = None,
        default_balance: Decimal = Decimal("0"),
    ):
        self._balances: Dict[int, Decimal] = {
            k: Decimal(str(v)) for k, v in (balances or {}).items()
        }
        self._default = Decimal(str(default_balance))
        self._lock = threading.Lock()

    def available(self, employee_id: int) -> Decimal:
        with self._lock:
            return self._balances.get(employee_id, self._default)

    def debit(self, employee_id: int, days: Decimal) -> None:
        days = _check_amount(days)
        with self._lock:
            remaining = self._balances.get(employee_id, self._default)
            if remaining < days:
                raise InsufficientBalance(employee_id, days, remaining)
            self._balances[employee_id] = remaining - days

    def credit(self, employee_id: int, days: Decimal) -> None:
        days = _check_amount(days)
        with self._lock:
            self._balances[employee_id] = self._balances.get(employee_id, self._default) + days

    def set_balance(self, employee_id: int, days: Decimal) -> None:
        days = _check_amount(days)
        with self._lock:
            self._balances[employee_id] = days


class SqlBalanceLedger:
    """
    Ledger rows in leave_balances, one per employee.

    Rows are created on first use with default_balance days. Like the record
    store it only flushes; commit/rollback belong to the caller.
    """

    def __init__(self, db: Session, default_balance: Decimal = Decimal("0")):
        self.db = db
        self.default_balance = Decimal(str(default_balance))

    def _get_balance_row(self, employee_id: int, for_update: bool = False) -> LeaveBalance:
        query = self.db.query(LeaveBalance).filter(LeaveBalance.employee_id == employee_id)
        if for_update:
            query = query.with_for_update()
        bal = query.populate_existing().first()
        if not bal:
            if self.db.get(Employee, employee_id) is None:
                raise LeaveValidationError(
                    f"Employee with id {employee_id} not found",
                    field="employee_id",
                )
            bal = LeaveBalance(employee_id=employee_id, remaining=self.default_balance)
            self.db.add(bal)
            self.db.flush()
            logger.info(
                "leave wallet created: employee_id=%s remaining=%s",
                employee_id, self.default_balance,
            )
        return bal

    def _adjust(self, employee_id: int, delta: Decimal, floor: Optional[Decimal] = None) -> int:
        """Apply delta in a single UPDATE; with floor set, only rows holding at least floor match"""
        stmt = (
            update(LeaveBalance)
            .where(LeaveBalance.employee_id == employee_id)
            .values(remaining=func.round(LeaveBalance.remaining + delta, 2))
            .execution_options(synchronize_session=False)
        )
        if floor is not None:
            stmt = stmt.where(LeaveBalance.remaining >= floor)
        return self.db.execute(stmt).rowcount

    def available(self, employee_id: int) -> Decimal:
        return Decimal(self._get_balance_row(employee_id).remaining)

    def debit(self, employee_id: int, days: Decimal) -> None:
        days = _check_amount(days)
        self._get_balance_row(employee_id)
        # Check and subtract in one statement so concurrent debits cannot both pass
        if self._adjust(employee_id, -days, floor=days) == 0:
            raise InsufficientBalance(employee_id, days, self.available(employee_id))
        logger.info(
            "leave wallet debit: employee_id=%s days=%s remaining=%s",
            employee_id, days, self.available(employee_id),
        )

    def credit(self, employee_id: int, days: Decimal) -> None:
        days = _check_amount(days)
        self._get_balance_row(employee_id)
        self._adjust(employee_id, days)
        logger.info(
            "leave wallet credit: employee_id=%s days=%s remaining=%s",
            employee_id, days, self.available(employee_id),
        )

    def set_balance(self, employee_id: int, days: Decimal) -> None:
        """Manual adjustment: overwrite the remaining days (caller commits)"""
        days = _check_amount(days)
        bal = self._get_balance_row(employee_id, for_update=True)
        bal.remaining = days
        self.db.flush()
        logger.info("leave wallet adjusted: employee_id=%s remaining=%s", employee_id, days)
