from fastapi import APIRouter

from .endpoints import health, snapshot, stream

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(snapshot.router)
api_router.include_router(stream.router)
