"""Health and configuration option endpoints."""

from fastapi import APIRouter

from duochat.config.settings import (
    LANGUAGES,
    MOODS,
    PROVIDER_LABELS,
    SUGGESTED_MODELS,
)

router = APIRouter(prefix="/api")


@router.get("/health")
async def health_check():
    """Health check endpoint to verify API is running."""
    return {"isAlive": True}


@router.get("/options")
async def get_options():
    """Choices a settings UI needs to build its forms."""
    return {
        "languages": LANGUAGES,
        "moods": [
            {"id": mood_id, "label": label, "instruction": instruction}
            for mood_id, (label, instruction) in MOODS.items()
        ],
        "providers": [
            {"id": provider_id, "label": label, "models": SUGGESTED_MODELS[provider_id]}
            for provider_id, label in PROVIDER_LABELS.items()
        ],
        "turn_delay_ms": {"min": 0, "max": 5000, "default": 1000},
    }
