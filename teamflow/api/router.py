from fastapi import APIRouter
from teamflow.api.endpoints import admin, auth, comments, files, messages, projects, tasks, teams, users

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(teams.router, prefix="/teams", tags=["teams"])
api_router.include_router(messages.router, tags=["messages"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(files.router, tags=["files"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(comments.router, tags=["comments"])
