# storefront/data/models/cart.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    # one cart per user
    subject_id = Column(
        String(255),
        ForeignKey("users.subject_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    version = Column(Integer, nullable=False, default=1)
    last_updated_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("UserModel", back_populates="cart")
    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.id",
        passive_deletes=True,
    )
