"""API routes."""

from fastapi import APIRouter

from community_api.routes import communities

api_router = APIRouter()

# Communities and their posts
api_router.include_router(communities.router, prefix="/communities", tags=["communities"])
