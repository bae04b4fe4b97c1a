# storefront/services/cart_service.py
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import (
    ConcurrencyConflictError,
    PersistenceError,
    ProfileNotFoundError,
    UnauthenticatedError,
)
from storefront.domain.schemas import CartOut
from storefront.repos.cart_repo import CartRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.catalog import ProductCatalog
from storefront.utils.logging import get_logger
from storefront.utils.retry import conflict_retry

logger = get_logger(__name__)


class CartService:
    """
    Use cases of the per-user cart.

    Every call takes the subject id explicitly; the service keeps no request state.
    Queries (get_cart, get_item_count) never write. Commands read the cart, change
    it and close with a version-checked UPDATE of the cart row, a lost race is
    rolled back and replayed from a fresh read.
    """

    def __init__(self, db: Session, catalog: ProductCatalog):
        self.repo = CartRepo(db)
        self.users = UserRepo(db)
        self.catalog = catalog

    # query
    def get_cart(self, subject_id: str | None) -> CartOut | None:
        if not subject_id:
            return None

        cart = self.repo.get_cart_by_subject(subject_id)
        if not cart:
            return None
        return CartOut.model_validate(cart)

    def get_item_count(self, subject_id: str | None) -> int:
        cart = self.get_cart(subject_id)
        return cart.item_count if cart else 0

    # commands
    def get_or_create_cart(self, subject_id: str | None) -> CartOut:
        return CartOut.model_validate(self._get_or_create(subject_id))

    @conflict_retry()
    def add_item(self, subject_id: str | None, product_id: int, quantity: int) -> CartOut | None:
        if quantity <= 0:
            logger.info(f"Ignoring add of product {product_id} with quantity {quantity}")
            return self.get_cart(subject_id)

        self._require_subject(subject_id)

        # dropped adds must not create a cart
        product = self.catalog.get_product(product_id)
        if product is None:
            logger.warning(f"Attempted to add non-existent product {product_id} for {subject_id}")
            return self.get_cart(subject_id)

        cart = self._get_or_create(subject_id)

        existing_item = next((i for i in cart.items if i.product_id == product_id), None)

        if existing_item:
            # merge, the snapshot from the first add stays
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
        else:
            logger.info(f"Adding product {product_id} to cart {cart.id}")
            cart.items.append(
                CartItemModel(
                    product_id=product_id,
                    product_name=product.name,
                    unit_price=product.price,
                    quantity=quantity,
                )
            )

        self._touch(cart)
        self.repo.commit()

        return self.get_cart(subject_id)

    @conflict_retry()
    def remove_item(self, subject_id: str | None, line_id: int) -> CartOut | None:
        cart = self._require_cart(subject_id)
        if cart is None:
            logger.warning(f"Attempted to remove cart item {line_id} but {subject_id} has no cart")
            return None

        line = next((i for i in cart.items if i.id == line_id), None)
        if line is None:
            logger.warning(f"Attempted to remove non-existent cart item {line_id} from cart {cart.id}")
            return CartOut.model_validate(cart)

        cart.items.remove(line)
        self._touch(cart)
        self.repo.commit()

        logger.info(f"Removed cart item {line_id} from cart {cart.id}")
        return self.get_cart(subject_id)

    @conflict_retry()
    def clear_cart(self, subject_id: str | None) -> CartOut | None:
        cart = self._require_cart(subject_id)
        if cart is None:
            return None

        if not cart.items:
            return CartOut.model_validate(cart)

        cart.items.clear()
        self._touch(cart)
        self.repo.commit()

        logger.info(f"Cleared cart {cart.id}")
        return self.get_cart(subject_id)

    # helpers
    def _require_subject(self, subject_id: str | None) -> None:
        if not subject_id:
            logger.warning("Cart mutation attempted without an authenticated user")
            raise UnauthenticatedError("User must be logged in to manage cart.")

    def _require_cart(self, subject_id: str | None) -> CartModel | None:
        self._require_subject(subject_id)
        return self.repo.get_cart_by_subject(subject_id)

    def _get_or_create(self, subject_id: str | None) -> CartModel:
        cart = self._require_cart(subject_id)
        if cart:
            return cart

        if self.users.get_user(subject_id) is None:
            logger.error(
                f"No profile for {subject_id} when creating cart, identity sync has not run"
            )
            raise ProfileNotFoundError("User profile not found. Please try logging in again.")

        logger.info(f"Creating new cart for user {subject_id}")
        try:
            cart = self.repo.create_cart(
                CartModel(
                    subject_id=subject_id,
                    version=1,
                    last_updated_at=datetime.now(timezone.utc),
                )
            )
        except IntegrityError:
            # another request created the cart first, use theirs
            self.repo.rollback()
            cart = self.repo.get_cart_by_subject(subject_id)
            if cart is None:
                raise PersistenceError(f"Could not create cart for {subject_id}")
            return cart

        self.repo.commit()
        return self.repo.get_cart_by_subject(subject_id)

    def _touch(self, cart: CartModel) -> None:
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "last_updated_at": datetime.now(timezone.utc),
            },
        )

        # UPDATE carts SET version = v + 1 WHERE id = :id AND version = v
        if rowcount == 0:
            self.repo.rollback()
            logger.warning(f"Cart {cart.id} changed concurrently, retrying")
            raise ConcurrencyConflictError(
                "Cart was modified by another operation"
            )
