# storefront/services/catalog.py
from decimal import Decimal
from typing import Dict, Iterable, List, Protocol

from storefront.domain.schemas import Product
from storefront.services.product_client import ProductClient
from storefront.utils.settings import CATALOG_BACKEND


class ProductCatalog(Protocol):
    def list_products(self) -> List[Product]: ...

    def get_product(self, product_id: int) -> Product | None: ...


DEMO_PRODUCTS = [
    Product(id=1, name="Classic Tee", description="Comfortable cotton tee.",
            price=Decimal("25.99"), image_url="/images/products/tee.png"),
    Product(id=2, name="Denim Jeans", description="Stylish blue denim.",
            price=Decimal("59.95"), image_url="/images/products/jeans.png"),
    Product(id=3, name="Hoodie Sweatshirt", description="Warm fleece hoodie.",
            price=Decimal("45.00"), image_url="/images/products/hoodie.png"),
    Product(id=4, name="Summer Dress", description="Light and airy dress.",
            price=Decimal("75.50"), image_url="/images/products/dress.png"),
]


class InMemoryCatalog:
    """Catalog backed by a dict, used for local runs and tests."""

    def __init__(self, products: Iterable[Product] = DEMO_PRODUCTS):
        self._products: Dict[int, Product] = {p.id: p for p in products}

    def list_products(self) -> List[Product]:
        return list(self._products.values())

    def get_product(self, product_id: int) -> Product | None:
        return self._products.get(product_id)

    def set_price(self, product_id: int, price: Decimal) -> None:
        product = self._products[product_id]
        self._products[product_id] = product.model_copy(update={"price": price})


def get_catalog() -> ProductCatalog:
    if CATALOG_BACKEND == "memory":
        return InMemoryCatalog()

    return ProductClient()
