# src/inventory_domain/infrastructure/api_clients/catalog_api_client.py
"""Client for the Product Catalog API."""

import json
import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.common.config.settings import settings
from src.common.dtos.stock_dtos import CatalogProductDTO
from src.common.exceptions.custom_exceptions import APIError

logger = logging.getLogger(__name__)


class ProductCatalogApiClient:
    """Reads product existence, initial stock and the track-inventory flag from the catalog."""

    def __init__(self) -> None:
        self.base_url = settings.CATALOG_API_BASE_URL
        self.token = settings.CATALOG_API_TOKEN
        self.timeout = settings.CATALOG_API_TIMEOUT

        # Configure session with connection pooling and retry strategy
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            backoff_factor=1,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=10, pool_maxsize=10)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        if self.token:
            self.session.headers.update({"Authorization": f"Bearer {self.token}"})

    def fetch_product(self, product_id: int) -> Optional[CatalogProductDTO]:
        """Fetches a single product; returns None when the catalog does not know it."""
        if not self.base_url:
            raise APIError("CATALOG_API_BASE_URL is not set in environment variables.")

        url = f"{self.base_url.rstrip('/')}/api/catalog/products/{product_id}"

        try:
            response = self.session.get(url, timeout=self.timeout)
            if response.status_code == 404:
                logger.info(f"Product {product_id} not found in catalog")
                return None
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.Timeout as e:
            raise APIError(f"Catalog request for product {product_id} timed out: {e}", original_exception=e)
        except json.JSONDecodeError as e:
            raise APIError(f"Failed to decode catalog response for product {product_id}: {e}", original_exception=e)
        except requests.exceptions.RequestException as e:
            status_code = e.response.status_code if e.response is not None else None
            raise APIError(
                f"Error fetching product {product_id} from catalog: {e}", original_exception=e, status_code=status_code
            )

        # The catalog wraps payloads as {"message": ..., "data": {...}}
        data = payload.get("data", payload) if isinstance(payload, dict) else None
        if not data:
            logger.warning(f"Empty catalog payload for product {product_id}")
            return None
        return CatalogProductDTO.from_api_response(data)

    def fetch_products(self, product_ids: list[int]) -> list[CatalogProductDTO]:
        """Fetches several products, skipping the ones that fail or do not exist."""
        products: list[CatalogProductDTO] = []
        for product_id in product_ids:
            try:
                product = self.fetch_product(product_id)
            except (APIError, ValueError) as e:
                logger.error(f"Skipping product {product_id}: {e}")
                continue
            if product is not None:
                products.append(product)
        return products

    def __del__(self) -> None:
        """Clean up the session when the object is destroyed."""
        if hasattr(self, "session"):
            self.session.close()
