# storefront/services/product_client.py
from typing import List

import requests
from requests import RequestException

from storefront.domain.errors import CatalogUnavailableError
from storefront.domain.schemas import Product
from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry
from storefront.utils.settings import PRODUCT_SERVICE_URL

logger = get_logger(__name__)


class ProductClient:
    """Read-only client for product-service."""

    def __init__(self, base_url: str | None = None, timeout: int = 2, session: requests.Session | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    @http_retry()
    def _get(self, path: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"ProductClient GET {url}")

        resp = self.http.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            return resp
        resp.raise_for_status()
        return resp

    def list_products(self) -> List[Product]:
        try:
            resp = self._get("/products")
        except RequestException as e:
            raise CatalogUnavailableError(f"Product catalog unavailable: {e}") from e
        return [Product.model_validate(p) for p in resp.json()]

    def get_product(self, product_id: int) -> Product | None:
        try:
            resp = self._get(f"/products/{product_id}")
        except RequestException as e:
            raise CatalogUnavailableError(f"Product catalog unavailable: {e}") from e

        if resp.status_code == 404:
            return None
        return Product.model_validate(resp.json())
