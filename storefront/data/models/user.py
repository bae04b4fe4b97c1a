from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    # subject identifier issued by the identity provider, never generated locally
    subject_id = Column(String(255), primary_key=True, autoincrement=False)

    email = Column(String(320), nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    display_name = Column(String(255), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=False)

    default_shipping_address = Column(String(1000), nullable=True)
    phone_number = Column(String(50), nullable=True)

    cart = relationship(
        "CartModel",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    orders = relationship(
        "OrderModel",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
