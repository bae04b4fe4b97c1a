# every model is imported here so Base.metadata knows all tables before create_all

from storefront.data.models.user import UserModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel

__all__ = ["UserModel", "CartModel", "CartItemModel", "OrderModel", "OrderItemModel"]
