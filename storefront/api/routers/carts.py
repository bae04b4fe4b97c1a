# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Response

from storefront.api.deps import get_cart_service, get_subject_id
from storefront.api.errors import http_error
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CartOut, ItemIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/", response_model=CartOut)
def get_cart(
    subject_id: str | None = Depends(get_subject_id),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.get_cart(subject_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    return cart


@router.get("/count")
def get_item_count(
    subject_id: str | None = Depends(get_subject_id),
    svc: CartService = Depends(get_cart_service),
):
    return {"count": svc.get_item_count(subject_id)}


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    subject_id: str | None = Depends(get_subject_id),
    svc: CartService = Depends(get_cart_service),
):
    try:
        cart = svc.add_item(subject_id, payload.product_id, payload.quantity)
    except StorefrontError as e:
        raise http_error(e)

    if not cart:
        # tolerated no-op, e.g. unknown product before any cart exists
        return Response(status_code=204)
    return cart


@router.delete("/items/{line_id}", response_model=CartOut)
def remove_item(
    line_id: int,
    subject_id: str | None = Depends(get_subject_id),
    svc: CartService = Depends(get_cart_service),
):
    try:
        cart = svc.remove_item(subject_id, line_id)
    except StorefrontError as e:
        raise http_error(e)

    if not cart:
        return Response(status_code=204)
    return cart


@router.delete("/items", response_model=CartOut)
def clear_cart(
    subject_id: str | None = Depends(get_subject_id),
    svc: CartService = Depends(get_cart_service),
):
    try:
        cart = svc.clear_cart(subject_id)
    except StorefrontError as e:
        raise http_error(e)

    if not cart:
        return Response(status_code=204)
    return cart
