from fastapi import APIRouter

from personnel.api.v1.endpoints import employees, health, notifications, qualifications

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(employees.router)
api_router.include_router(qualifications.router)
api_router.include_router(notifications.router)
