from fastapi import APIRouter

from src.backoffice.api.v1 import accounts, auth, grants, invites

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(accounts.router)
api_router.include_router(grants.router)
api_router.include_router(invites.router)
