from fastapi import APIRouter

from app.api import media
from app.api.routes import admin, auth, storefront

api_router = APIRouter()

api_router.include_router(media.router)
api_router.include_router(auth.router)
api_router.include_router(admin.router)
api_router.include_router(storefront.router)
