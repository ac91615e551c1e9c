"""
Pytest configuration and fixtures
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from leave_tracker.main import app
from leave_tracker.db.base import Base
from leave_tracker.core.deps import get_db
from leave_tracker.services.directory_service import InMemoryDirectory
from leave_tracker.services.leave_service import LeaveService
from leave_tracker.services.leave_store import InMemoryLeaveStore
from leave_tracker.services.leave_wallet_service import InMemoryBalanceLedger
from leave_tracker.services.lifecycle_service import RecordLockRegistry

# Import all models to ensure they're registered with Base.metadata
from leave_tracker.models import Employee, LeaveRequest, LeaveBalance  # noqa


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- In-memory adapters ---


@pytest.fixture
def store():
    """Record store whose first id is 101"""
    return InMemoryLeaveStore(start_id=101)


@pytest.fixture
def ledger():
    """Employee 7 starts with 10 days, employee 8 with 3"""
    return InMemoryBalanceLedger({7: Decimal("10"), 8: Decimal("3")})


@pytest.fixture
def directory():
    """Manager 1 leads 7 and 8; manager 2 is known but has no reports"""
    return InMemoryDirectory({1: [7, 8], 2: []})


@pytest.fixture
def service(store, ledger, directory):
    return LeaveService(store, ledger, directory, locks=RecordLockRegistry())


# --- SQL directory rows ---


@pytest.fixture
def manager(db):
    mgr = Employee(name="Manager", active=True)
    db.add(mgr)
    db.commit()
    db.refresh(mgr)
    return mgr


@pytest.fixture
def reportee(db, manager):
    emp = Employee(name="Reportee", reporting_manager_id=manager.id, active=True)
    db.add(emp)
    db.commit()
    db.refresh(emp)
    return emp


@pytest.fixture
def funded_reportee(db, reportee):
    """Reportee with 10 leave days in the ledger"""
    db.add(LeaveBalance(employee_id=reportee.id, remaining=Decimal("10")))
    db.commit()
    return reportee
