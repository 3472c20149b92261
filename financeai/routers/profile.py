"""
Financial profile and account details
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from financeai.calculators import financial_insights
from financeai.dependencies import get_gateway, get_user_id
from financeai.gateway import PersistenceGateway
from financeai.schemas import FinancialProfileIn, UserProfileIn

logger = logging.getLogger(__name__)

profile_router = APIRouter(prefix="/profile", tags=["profile"])


@profile_router.get("")
def get_financial_profile(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Get the user's financial profile"""
    profile = gateway.first("financial_profiles", user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Financial profile not found")
    return profile


@profile_router.put("")
def save_financial_profile(
    body: FinancialProfileIn,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Create the profile at onboarding, or update it afterwards"""
    profile = gateway.upsert_single("financial_profiles", user_id, body.model_dump(exclude_unset=True))
    logger.info(f"Saved financial profile for user {user_id}")
    return profile


@profile_router.get("/insights")
def get_insights(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    profile = gateway.first("financial_profiles", user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Financial profile not found")
    return financial_insights(profile)


@profile_router.get("/details")
def get_user_details(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    details = gateway.first("profiles", user_id)
    if not details:
        raise HTTPException(status_code=404, detail="Profile not found")
    return details


@profile_router.put("/details")
def save_user_details(
    body: UserProfileIn,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return gateway.upsert_single("profiles", user_id, body.model_dump(exclude_unset=True))
