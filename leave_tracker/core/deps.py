"""
Dependencies for FastAPI endpoints
"""
from typing import Generator
from fastapi import Depends
from sqlalchemy.orm import Session
from leave_tracker.core.config import settings
from leave_tracker.db.session import SessionLocal
from leave_tracker.services.leave_service import LeaveService, build_leave_service
from leave_tracker.services.leave_wallet_service import SqlBalanceLedger


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_leave_service(db: Session = Depends(get_db)) -> LeaveService:
    """Request-scoped leave service bound to the request's session"""
    return build_leave_service(db)


def get_ledger(db: Session = Depends(get_db)) -> SqlBalanceLedger:
    """Request-scoped balance ledger bound to the request's session"""
    return SqlBalanceLedger(db, default_balance=settings.DEFAULT_LEAVE_BALANCE)
