from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from storefront.api.deps import get_identity_service, get_subject_id
from storefront.api.errors import http_error
from storefront.domain.errors import StorefrontError, UnauthenticatedError
from storefront.domain.schemas import ContactDetailsIn, UserRead
from storefront.services.identity_service import IdentitySyncService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/sync", response_model=UserRead)
def sync_profile(
    claims: Dict[str, Any] = Body(...),
    svc: IdentitySyncService = Depends(get_identity_service),
):
    """
    Called by the login callback with the verified claim set.
    """
    try:
        return svc.sync_profile(claims)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/me", response_model=UserRead)
def get_me(
    subject_id: str | None = Depends(get_subject_id),
    svc: IdentitySyncService = Depends(get_identity_service),
):
    try:
        if not subject_id:
            raise UnauthenticatedError("Login required")
        return svc.get_profile(subject_id)
    except StorefrontError as e:
        raise http_error(e)


@router.put("/me/contact", response_model=UserRead)
def update_contact(
    payload: ContactDetailsIn,
    subject_id: str | None = Depends(get_subject_id),
    svc: IdentitySyncService = Depends(get_identity_service),
):
    try:
        if not subject_id:
            raise UnauthenticatedError("Login required")
        return svc.update_contact_details(
            subject_id,
            default_shipping_address=payload.default_shipping_address,
            phone_number=payload.phone_number,
        )
    except StorefrontError as e:
        raise http_error(e)
