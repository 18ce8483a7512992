"""API routes for Lyric Studio."""

from fastapi import APIRouter

from backend.api.routes.auth import router as auth_router
from backend.api.routes.feedback import router as feedback_router
from backend.api.routes.generate import router as generate_router
from backend.api.routes.health import router as health_router
from backend.api.routes.keywords import router as keywords_router
from backend.api.routes.lyrics import router as lyrics_router
from backend.api.routes.melodies import router as melodies_router
from backend.api.routes.preferences import router as preferences_router

router = APIRouter()

# Include all route modules
router.include_router(health_router, tags=["health"])
router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(keywords_router, prefix="/keywords", tags=["keywords"])
router.include_router(melodies_router, prefix="/melodies", tags=["melodies"])
router.include_router(generate_router, prefix="/generate", tags=["generate"])
router.include_router(lyrics_router, prefix="/lyrics", tags=["lyrics"])
router.include_router(preferences_router, prefix="/preferences", tags=["preferences"])
router.include_router(feedback_router, prefix="/feedback", tags=["feedback"])
