from fastapi import APIRouter

from shopfloor.api.auth import router as auth_router
from shopfloor.api.jobs import router as jobs_router
from shopfloor.api.processes import router as processes_router
from shopfloor.api.schedule import router as schedule_router

api_router = APIRouter()

# Auth routes at /api/auth/*
api_router.include_router(auth_router, prefix="/api/auth", tags=["auth"])

# Production routes at /api/processes/*
api_router.include_router(processes_router, prefix="/api", tags=["processes"])
api_router.include_router(jobs_router, prefix="/api", tags=["jobs"])

# Schedule routes at /api/schedule/*
api_router.include_router(schedule_router, prefix="/api", tags=["schedule"])
