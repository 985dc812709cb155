"""
Metadata API endpoints

Provides reference data for:
- Allowed question counts
- Readiness tiers and their thresholds
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from interview_coach.config.settings import Settings, get_settings
from interview_coach.core.aggregator import LOWEST_TIER, READINESS_THRESHOLDS
from interview_coach.models.feedback import ReadinessTier

router = APIRouter()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class QuestionCountInfo(BaseModel):
    """Question count menu."""
    options: list[int]
    default: int


class ReadinessTierInfo(BaseModel):
    """Information about a readiness tier."""
    name: str
    rank: int
    min_average_score: float
    description: str


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/question-counts", response_model=QuestionCountInfo)
async def get_question_counts(settings: Settings = Depends(get_settings)) -> QuestionCountInfo:
    """Get the allowed number of questions per session."""
    return QuestionCountInfo(
        options=settings.question_count_options,
        default=settings.default_question_count,
    )


@router.get("/readiness-tiers", response_model=list[ReadinessTierInfo])
async def get_readiness_tiers() -> list[ReadinessTierInfo]:
    """Get readiness tiers, lowest first."""
    thresholds: dict[ReadinessTier, float] = {tier: score for score, tier in READINESS_THRESHOLDS}
    thresholds[LOWEST_TIER] = 0.0

    return [
        ReadinessTierInfo(
            name=tier.value,
            rank=tier.rank,
            min_average_score=thresholds[tier],
            description=tier.description,
        )
        for tier in ReadinessTier
    ]
