# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_order_service, get_subject_id
from storefront.api.errors import http_error
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CheckoutDefaults, OrderCreate, OrderOut
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/", response_model=List[OrderOut])
def list_orders(
    subject_id: str | None = Depends(get_subject_id),
    svc: OrderService = Depends(get_order_service),
):
    """
    Orders of the current user, newest first.
    """
    try:
        return svc.list_orders(subject_id)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/checkout", response_model=CheckoutDefaults)
def checkout_defaults(
    subject_id: str | None = Depends(get_subject_id),
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.get_checkout_defaults(subject_id)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/", response_model=OrderOut, status_code=201)
def place_order(
    payload: OrderCreate,
    subject_id: str | None = Depends(get_subject_id),
    svc: OrderService = Depends(get_order_service),
):
    """
    Places an order from the current cart and empties it.
    """
    try:
        return svc.place_order(subject_id, payload.shipping_address, payload.contact_phone)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    subject_id: str | None = Depends(get_subject_id),
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.get_order_for_confirmation(order_id, subject_id)
    except StorefrontError as e:
        raise http_error(e)
