# storefront/repos/order_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.repos.base_repo import BaseRepo


class OrderRepo(BaseRepo):
    def __init__(self, db: Session):
        super().__init__(db)

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order_for_subject(self, order_id: int, subject_id: str) -> OrderModel | None:
        # owner is part of the lookup so foreign orders look exactly like missing ones
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.subject_id == subject_id)
            .options(selectinload(OrderModel.items))
        ).scalar_one_or_none()

    def list_orders_for_subject(self, subject_id: str) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.subject_id == subject_id)
                .options(selectinload(OrderModel.items))
                .order_by(OrderModel.ordered_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )
