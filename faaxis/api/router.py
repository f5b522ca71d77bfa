"""
API router.

Aggregates all authentication endpoints.
"""

from fastapi import APIRouter

from faaxis.api.endpoints import admin_auth, auth, jwt_auth, totp

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    auth.router, tags=["Session authentication"]
)
api_router.include_router(
    jwt_auth.router, prefix="/jwt", tags=["Token authentication"]
)
api_router.include_router(
    admin_auth.router, prefix="/admin-auth", tags=["Admin authentication"]
)
api_router.include_router(
    totp.router, tags=["TOTP"]
)
