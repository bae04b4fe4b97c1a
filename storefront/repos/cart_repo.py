# storefront/repos/cart_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart import CartModel
from storefront.repos.base_repo import BaseRepo


class CartRepo(BaseRepo):
    def __init__(self, db: Session):
        super().__init__(db)

    def get_cart_by_subject(self, subject_id: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel)
            .where(CartModel.subject_id == subject_id)
            .options(selectinload(CartModel.items))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def update_cart_version(self, cart_id: int, old_version: int, new_data: dict) -> int:
        # UPDATE carts SET ... WHERE id = :id AND version = :old_version
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
