from typing import List

from fastapi import APIRouter, Depends, HTTPException

from storefront.api.errors import http_error
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import Product
from storefront.services.catalog import ProductCatalog, get_catalog

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[Product])
def list_products(catalog: ProductCatalog = Depends(get_catalog)):
    try:
        return catalog.list_products()
    except StorefrontError as e:
        raise http_error(e)


@router.get("/{product_id}", response_model=Product)
def get_product(product_id: int, catalog: ProductCatalog = Depends(get_catalog)):
    try:
        product = catalog.get_product(product_id)
    except StorefrontError as e:
        raise http_error(e)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
