"""
API Dependencies

Provides dependency injection for API endpoints.
Manages the singleton session engine and caller identity.
"""

from fastapi import Header

from interview_coach.config.settings import get_settings
from interview_coach.core.generation_gateway import LLMGenerationGateway
from interview_coach.core.session_engine import SessionEngine
from interview_coach.core.session_store import SessionStore


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_engine: SessionEngine | None = None


def get_engine() -> SessionEngine:
    """
    Get the session engine singleton.

    Lazily initializes the store and generation gateway.
    """
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = SessionEngine(
            store=SessionStore(settings.database_url),
            gateway=LLMGenerationGateway(settings),
            settings=settings,
        )

    return _engine


def get_user_id(x_user_id: str = Header(..., min_length=1, max_length=128)) -> str:
    """Identity of the caller, set by the authenticating proxy."""
    return x_user_id


async def startup() -> None:
    """Create storage tables."""
    await get_engine().store.create_all()


async def cleanup() -> None:
    """Cleanup resources on shutdown."""
    global _engine

    if _engine:
        await _engine.close()

    _engine = None
