from __future__ import annotations
"""Master API router: mounts all sub-routers."""

from fastapi import APIRouter

from veo_agent.api.tools import router as tools_router

api_router = APIRouter(redirect_slashes=False)

api_router.include_router(tools_router, tags=["Tools"])
