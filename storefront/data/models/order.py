from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from storefront.data.database import Base

ORDER_PLACED_PENDING_PAYMENT = "OrderPlaced_PendingPayment"


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    subject_id = Column(
        String(255),
        ForeignKey("users.subject_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    ordered_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    total = Column(Numeric(10, 2), nullable=False)
    shipping_address = Column(String(1000), nullable=False)
    contact_phone = Column(String(50), nullable=False)
    status = Column(String(50), nullable=False, default=ORDER_PLACED_PENDING_PAYMENT)

    user = relationship("UserModel", back_populates="orders")
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
        passive_deletes=True,
    )
