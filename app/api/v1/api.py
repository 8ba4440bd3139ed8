from fastapi import APIRouter

from app.api.v1.endpoints import auth, health, locations, search, users

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(
    locations.router, prefix="/mobile/locations", tags=["locations"]
)
api_router.include_router(search.router, prefix="/mobile/search", tags=["search"])
