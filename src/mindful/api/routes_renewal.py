"""Renewal router: cooldown eligibility, opening the next session, and payment credits."""

from fastapi import APIRouter, Depends, status

from ..database import UserProfile
from ..services import SessionController
from .dependencies import get_current_user, get_session_controller
from .schemas import CreditCreate, CreditResponse, EligibilityResponse, RenewalResponse

router = APIRouter(tags=["renewal"])


@router.get("/renewal/eligibility", response_model=EligibilityResponse)
async def get_renewal_eligibility(
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    """Whether the user may open a new session now, and if not, when."""
    eligibility = await controller.get_renewal_eligibility(user)
    return EligibilityResponse(**eligibility.to_dict())


@router.post("/renewal", response_model=RenewalResponse)
async def renew_session(
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    result = await controller.renew_session(user)
    return RenewalResponse(**result.to_dict())


@router.post("/credits", response_model=CreditResponse, status_code=status.HTTP_201_CREATED)
async def record_credit(
    data: CreditCreate,
    user: UserProfile = Depends(get_current_user),
    controller: SessionController = Depends(get_session_controller),
):
    """Record a captured payment as one unredeemed session credit."""
    credit = await controller.record_credit(user, data.payment_id)
    return CreditResponse.model_validate(credit)
