"""
Main API router
"""
from fastapi import APIRouter

from leave_tracker.api.v1 import (
    health,
    version,
    leaves,
    employee_leaves,
    employees,
    managers,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(leaves.router, prefix="/leave", tags=["leaves"])
api_router.include_router(employee_leaves.router, prefix="/employee", tags=["employee-leaves"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(managers.router, prefix="/manager", tags=["managers"])
