from fastapi import APIRouter

from familyhub.api.auth import router as auth_router
from familyhub.api.calendar import router as calendar_router
from familyhub.api.dashboard import router as dashboard_router
from familyhub.api.families import router as families_router
from familyhub.api.members import router as members_router
from familyhub.api.messages import router as messages_router
from familyhub.api.tasks import router as tasks_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(calendar_router)
api_router.include_router(dashboard_router)
api_router.include_router(families_router)
api_router.include_router(members_router)
api_router.include_router(messages_router)
api_router.include_router(tasks_router)
