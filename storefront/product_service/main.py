# storefront/product_service/main.py
from typing import List

from fastapi import FastAPI, HTTPException

from storefront.domain.schemas import Product
from storefront.services.catalog import InMemoryCatalog

app = FastAPI(title="Product Service (dev mock)")

catalog = InMemoryCatalog()


@app.get("/products", response_model=List[Product])
def list_products():
    return catalog.list_products()


@app.get("/products/{product_id}", response_model=Product)
def get_product(product_id: int):
    product = catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
