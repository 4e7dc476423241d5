"""API v1 router aggregator."""

from fastapi import APIRouter

from iep.api.v1 import (
    assignments,
    attendance,
    auth,
    backups,
    classes,
    files,
    grades,
    onboarding,
    schedules,
    students,
    teachers,
    tenants,
    webhooks,
)

api_router = APIRouter(tags=["API v1"])

# Include all API routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(tenants.router, prefix="/tenants", tags=["Tenants"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(teachers.router, prefix="/teachers", tags=["Teachers"])
api_router.include_router(classes.router, prefix="/classes", tags=["Classes"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(grades.router, prefix="/grades", tags=["Grades"])
api_router.include_router(schedules.router, prefix="/schedules", tags=["Schedules"])
api_router.include_router(files.router, prefix="/files", tags=["Files"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
api_router.include_router(backups.router, prefix="/backups", tags=["Backups"])
api_router.include_router(onboarding.router, prefix="/onboarding", tags=["Onboarding"])
