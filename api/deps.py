"""
FastAPI Dependency Providers for the Bad Idea API.

Architecture:
- Settings, Supabase client and AI client are cached per-process (lru_cache)
- Auth verifies the bearer token with Supabase Auth
- Repositories are instantiated per-request with the shared Supabase client
- Services and use cases are wired through dependency chains, so tests can
  replace any layer via app.dependency_overrides
"""

from functools import lru_cache
from typing import Dict, Optional

from fastapi import Depends, Header
from supabase import Client, create_client

from application.exceptions import StoreUnavailableError
from application.models import Feature, FeaturePolicy
from application.use_cases.get_daily_idea import GetDailyIdeaUseCase
from application.use_cases.rate_limited_action import (
    RateLimitedActionGateway,
    policies_from_settings,
)
from application.use_cases.roast_idea import RoastIdeaUseCase
from application.use_cases.stream_advisor_chat import StreamAdvisorChatUseCase
from backend.auth import (
    SupabaseAuthVerifier,
    get_current_user as _get_current_user,
)
from backend.services.ai_client import AIClient
from backend.services.idea_generator import IdeaGenerator
from backend.services.usage_ledger import UsageLedger
from backend.settings import Settings, get_settings as _get_settings
from infrastructure.db.idea_repository import SupabaseDailyIdeaRepository
from infrastructure.db.usage_event_repository import SupabaseUsageEventRepository


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """Get cached application settings."""
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


@lru_cache
def get_supabase_client() -> Optional[Client]:
    """
    Get Supabase client instance (cached).

    Returns:
        Client: Supabase client instance, or None if not configured
    """
    settings = _get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        return None

    return create_client(settings.supabase_url, settings.supabase_key)


def get_supabase_client_required() -> Client:
    """
    Get Supabase client instance, raising if not configured.

    Raises:
        StoreUnavailableError: 503 if Supabase is not configured
    """
    client = get_supabase_client()
    if client is None:
        raise StoreUnavailableError(
            "Database not available. Supabase credentials not configured."
        )
    return client


# =============================================================================
# Authentication Providers
# =============================================================================


def get_auth_verifier() -> Optional[SupabaseAuthVerifier]:
    """Supabase Auth verifier, or None when Supabase is not configured."""
    client = get_supabase_client()
    if client is None:
        return None
    return SupabaseAuthVerifier(client)


def get_current_user(
    authorization: Optional[str] = Header(None),
    verifier: Optional[SupabaseAuthVerifier] = Depends(get_auth_verifier),
) -> str:
    """
    Get the current authenticated user ID.

    Raises:
        AuthRequiredError: 401 when the Authorization header is missing
        AuthInvalidError: 401 when the token is rejected
    """
    return _get_current_user(authorization, verifier)


# =============================================================================
# Repository Providers
# =============================================================================


def get_idea_repository(
    client: Client = Depends(get_supabase_client_required),
) -> SupabaseDailyIdeaRepository:
    """Get daily idea repository instance."""
    return SupabaseDailyIdeaRepository(client)


def get_usage_event_repository(
    client: Client = Depends(get_supabase_client_required),
) -> SupabaseUsageEventRepository:
    """Get usage event repository instance."""
    return SupabaseUsageEventRepository(client)


# =============================================================================
# Service Providers
# =============================================================================


@lru_cache
def get_ai_client() -> Optional[AIClient]:
    """
    Get cached AI client instance.

    Returns None when ANTHROPIC_API_KEY is missing; generation then fails
    with GenerationError while stored ideas are still served.
    """
    settings = _get_settings()
    if not settings.anthropic_api_key:
        return None
    return AIClient(
        api_key=settings.anthropic_api_key,
        helicone_api_key=settings.helicone_api_key,
        helicone_enabled=settings.helicone_enabled,
        default_model=settings.default_model,
    )


def get_idea_generator(
    ai_client: Optional[AIClient] = Depends(get_ai_client),
    settings: Settings = Depends(get_settings),
) -> IdeaGenerator:
    """Get content generator instance."""
    return IdeaGenerator(
        ai_client=ai_client,
        model=settings.default_model,
        advisor_max_tokens=settings.advisor_max_tokens,
    )


def get_usage_ledger(
    repo: SupabaseUsageEventRepository = Depends(get_usage_event_repository),
) -> UsageLedger:
    """Get usage ledger instance."""
    return UsageLedger(repo)


def get_rate_limited_action_gateway(
    ledger: UsageLedger = Depends(get_usage_ledger),
) -> RateLimitedActionGateway:
    """Get rate-limited action gateway instance."""
    return RateLimitedActionGateway(ledger)


def get_feature_policies(
    settings: Settings = Depends(get_settings),
) -> Dict[Feature, FeaturePolicy]:
    """Get per-feature limits from settings."""
    return policies_from_settings(settings)


# =============================================================================
# Use Case Providers
# =============================================================================


def get_daily_idea_use_case(
    repo: SupabaseDailyIdeaRepository = Depends(get_idea_repository),
    generator: IdeaGenerator = Depends(get_idea_generator),
) -> GetDailyIdeaUseCase:
    """Get daily idea use case."""
    return GetDailyIdeaUseCase(idea_repo=repo, generator=generator)


def get_roast_idea_use_case(
    gateway: RateLimitedActionGateway = Depends(get_rate_limited_action_gateway),
    generator: IdeaGenerator = Depends(get_idea_generator),
    policies: Dict[Feature, FeaturePolicy] = Depends(get_feature_policies),
) -> RoastIdeaUseCase:
    """Get roast use case."""
    return RoastIdeaUseCase(
        gateway=gateway, generator=generator, policy=policies[Feature.ROAST]
    )


def get_stream_advisor_chat_use_case(
    gateway: RateLimitedActionGateway = Depends(get_rate_limited_action_gateway),
    generator: IdeaGenerator = Depends(get_idea_generator),
    policies: Dict[Feature, FeaturePolicy] = Depends(get_feature_policies),
) -> StreamAdvisorChatUseCase:
    """Get advisor chat streaming use case."""
    return StreamAdvisorChatUseCase(
        gateway=gateway, generator=generator, policy=policies[Feature.ADVISOR_CHAT]
    )


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Settings
    "get_settings",
    # Database
    "get_supabase_client",
    "get_supabase_client_required",
    # Authentication
    "get_auth_verifier",
    "get_current_user",
    # Repositories
    "get_idea_repository",
    "get_usage_event_repository",
    # Services
    "get_ai_client",
    "get_idea_generator",
    "get_usage_ledger",
    "get_rate_limited_action_gateway",
    "get_feature_policies",
    # Use Cases
    "get_daily_idea_use_case",
    "get_roast_idea_use_case",
    "get_stream_advisor_chat_use_case",
]
