from fastapi import APIRouter
from termplan.api.routers import employees, projects, worklogs, settings, reports

api_router = APIRouter()
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(worklogs.router, prefix="/worklogs", tags=["worklogs"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
