from fastapi import APIRouter

from essenza_web.app.api.routes import actions, pages

api_router = APIRouter()
api_router.include_router(pages.router)
api_router.include_router(actions.router)
