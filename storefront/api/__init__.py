# storefront/api/__init__.py
from fastapi import FastAPI

from storefront.api.routers import carts, health, orders, products, users


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app
