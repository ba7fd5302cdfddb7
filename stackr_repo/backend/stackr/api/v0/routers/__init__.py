from fastapi import APIRouter
from .challenges import router as challenges_router

# Create main API router
api_router = APIRouter(prefix="/api/v0")

api_router.include_router(challenges_router)  # /challenges, /users/{user_id}/challenges

# Export for use in main app
__all__ = ["api_router"]
