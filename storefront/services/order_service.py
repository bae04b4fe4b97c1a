# storefront/services/order_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List

from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import ORDER_PLACED_PENDING_PAYMENT, OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import (
    CheckoutInProgressError,
    ConcurrencyConflictError,
    EmptyCartError,
    OrderNotFoundError,
    PersistenceError,
    UnauthenticatedError,
    ValidationError,
)
from storefront.domain.schemas import CheckoutDefaults, OrderOut, ShippingDetails
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger
from storefront.utils.retry import conflict_retry

logger = get_logger(__name__)


def _field_errors(exc: PydanticValidationError) -> Dict[str, str]:
    errors = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__root__"
        if err["type"] == "value_error":
            errors[field] = str(err["ctx"]["error"])
        else:
            errors[field] = err["msg"]
    return errors


class OrderService:
    """
    Checkout and order lookups.

    Separate from CartService: the cart is read through its repository inside
    the checkout transaction, so creating the order and emptying the cart
    commit or roll back together.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService | None = None,
        notification_service: NotificationService | None = None,
    ):
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.users = UserRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    def place_order(self, subject_id: str | None, shipping_address: str, contact_phone: str) -> OrderOut:
        """
        Use case: turn the subject's cart into an order.

        1. Rejects an empty cart (EmptyCartError)
        2. Validates address and phone (ValidationError)
        3. Freezes the cart lines into order lines and empties the cart, one transaction
        4. Queues the confirmation notification
        """
        if not subject_id:
            raise UnauthenticatedError("User must be logged in to place an order.")

        token = None
        if self.lock_service is not None:
            token = self.lock_service.acquire_checkout_lock(subject_id)
            if token is None:
                logger.warning(f"Checkout already running for {subject_id}")
                raise CheckoutInProgressError("A checkout for this account is already in progress.")

        try:
            order = self._create_order_from_cart(subject_id, shipping_address, contact_phone)
        finally:
            if token is not None:
                self._release_lock(subject_id, token)

        self.notification_service.send_order_confirmation(subject_id, order.id)
        return order

    @conflict_retry()
    def _create_order_from_cart(self, subject_id: str, shipping_address: str, contact_phone: str) -> OrderOut:
        cart = self.carts.get_cart_by_subject(subject_id)

        if cart is None or not cart.items:
            logger.warning(f"Checkout attempt with empty cart for {subject_id}")
            raise EmptyCartError("Your cart is empty. Please add items before checking out.")

        try:
            details = ShippingDetails(shipping_address=shipping_address, contact_phone=contact_phone)
        except PydanticValidationError as e:
            logger.warning(f"Checkout details invalid for {subject_id}")
            raise ValidationError(_field_errors(e)) from e

        now = datetime.now(timezone.utc)
        total = sum((i.unit_price * i.quantity for i in cart.items), Decimal("0.00"))

        order = OrderModel(
            subject_id=subject_id,
            ordered_at=now,
            total=total,
            shipping_address=details.shipping_address,
            contact_phone=details.contact_phone,
            status=ORDER_PLACED_PENDING_PAYMENT,
            items=[
                OrderItemModel(
                    product_id=i.product_id,
                    product_name=i.product_name,
                    unit_price=i.unit_price,
                    quantity=i.quantity,
                )
                for i in cart.items
            ],
        )

        try:
            self.repo.add_order(order)
            rowcount = self.carts.update_cart_version(
                cart_id=cart.id,
                old_version=cart.version,
                new_data={"version": cart.version + 1, "last_updated_at": now},
            )
            cart.items.clear()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to write order for {subject_id}")
            self.repo.rollback()
            raise PersistenceError("Could not place order") from e

        if rowcount == 0:
            # cart changed after we read it, the order would not match what the user sees
            self.repo.rollback()
            logger.warning(f"Cart {cart.id} changed during checkout, retrying")
            raise ConcurrencyConflictError("Cart was modified during checkout")

        self.repo.commit()

        logger.info(f"Order {order.id} placed for user {subject_id}, total {total}")
        return OrderOut.model_validate(order)

    def _release_lock(self, subject_id: str, token: str) -> None:
        try:
            self.lock_service.release_checkout_lock(subject_id, token)
        except RedisError:
            # the key carries a TTL, it goes away on its own
            logger.exception(f"Could not release checkout lock for {subject_id}")

    def get_order_for_confirmation(self, order_id: int, subject_id: str | None) -> OrderOut:
        """
        Use case: show one order to its owner.
        """
        if not subject_id:
            raise UnauthenticatedError("User must be logged in to view orders.")

        order = self.repo.get_order_for_subject(order_id, subject_id)
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found")
        return OrderOut.model_validate(order)

    def list_orders(self, subject_id: str | None) -> List[OrderOut]:
        if not subject_id:
            raise UnauthenticatedError("User must be logged in to view orders.")
        return [OrderOut.model_validate(o) for o in self.repo.list_orders_for_subject(subject_id)]

    def get_checkout_defaults(self, subject_id: str | None) -> CheckoutDefaults:
        if not subject_id:
            raise UnauthenticatedError("User must be logged in to check out.")

        # a missing profile only means nothing to pre-fill
        user = self.users.get_user(subject_id)
        if user is None:
            return CheckoutDefaults()
        return CheckoutDefaults(
            shipping_address=user.default_shipping_address or "",
            contact_phone=user.phone_number or "",
        )
