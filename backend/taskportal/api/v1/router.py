from fastapi import APIRouter
from taskportal.api.v1.endpoints import auth, tasks, students, messages, blog, websocket
from taskportal.api.v1.endpoints.admin import admin_router

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(messages.router, prefix="/messages", tags=["Messages"])
api_router.include_router(blog.router, prefix="/blog", tags=["Blog"])
api_router.include_router(admin_router)

# Push notifications: WS /api/v1/ws
api_router.include_router(websocket.router, tags=["WebSocket"])
