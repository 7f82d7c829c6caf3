from fastapi import APIRouter

from . import auth, links, stats, redirect

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(links.router)
api_router.include_router(stats.router)

redirect_router = redirect.router

__all__ = ["api_router", "redirect_router"]
