"""Application domain models for daily ideas and usage quotas."""

from .ideas import (
    PLACEHOLDER_IDEA,
    ArchivePage,
    BadIdea,
    DailyIdea,
    DailyIdeaResult,
)
from .usage import (
    Feature,
    FeaturePolicy,
    QuotaStatus,
)

__all__ = [
    "PLACEHOLDER_IDEA",
    "ArchivePage",
    "BadIdea",
    "DailyIdea",
    "DailyIdeaResult",
    "Feature",
    "FeaturePolicy",
    "QuotaStatus",
]
