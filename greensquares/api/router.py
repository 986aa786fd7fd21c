"""Main API router."""

from fastapi import APIRouter

from greensquares.api.auth import router as auth_router
from greensquares.api.oauth import router as oauth_router
from greensquares.api.repositories import router as repositories_router
from greensquares.api.user import router as user_router

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(repositories_router, prefix="/repositories", tags=["repositories"])
api_router.include_router(user_router, tags=["users"])

# Browser-facing OAuth redirects live outside /api
oauth_browser_router = APIRouter(prefix="/auth", tags=["oauth"])
oauth_browser_router.include_router(oauth_router)
