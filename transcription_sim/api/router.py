"""Aggregate all API routers."""

from fastapi import APIRouter
from transcription_sim.api.info import router as info_router
from transcription_sim.api.uploads import router as uploads_router

api_router = APIRouter()
api_router.include_router(info_router, tags=["info"])
api_router.include_router(uploads_router, tags=["uploads"])
