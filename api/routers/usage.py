"""Quota lookup endpoint.

GET /usage?feature=roast|advisor-chat returns the caller's remaining quota
without consuming any.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from api.deps import (
    get_current_user,
    get_feature_policies,
    get_rate_limited_action_gateway,
)
from application.models import Feature, FeaturePolicy
from application.use_cases.rate_limited_action import RateLimitedActionGateway

router = APIRouter(tags=["usage"])


@router.get("/usage")
def get_usage(
    feature: Feature = Query(...),
    user_id: str = Depends(get_current_user),
    gateway: RateLimitedActionGateway = Depends(get_rate_limited_action_gateway),
    policies: Dict[Feature, FeaturePolicy] = Depends(get_feature_policies),
) -> Dict[str, Any]:
    policy = policies[feature]
    quota = gateway.quota(user_id, policy.feature, policy.limit, policy.window)
    return quota.to_payload()
