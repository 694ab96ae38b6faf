"""
Catalog convenience operations.

Thin call sequences over the planners and the dispatcher for the product,
category and attribute collections of the WooCommerce v3 REST API.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Type, TypeVar

from pydantic import ValidationError

from .models import Attribute, Category, Product, WooModel
from .planners import PagingMode, decode_json_list, merge_pages, plan_batches, plan_resource_pages
from .request import PostRequest


logger = logging.getLogger(__name__)

API_ROOT = "/wp-json/wc/v3"
PRODUCTS = f"{API_ROOT}/products"
CATEGORIES = f"{API_ROOT}/products/categories"
ATTRIBUTES = f"{API_ROOT}/products/attributes"

ModelT = TypeVar("ModelT", bound=WooModel)


def batch_endpoint(endpoint: str) -> str:
    return f"{endpoint}/batch"


def _decoder(model: Type[ModelT]):
    def decode(raw: bytes) -> List[ModelT]:
        try:
            return [model.model_validate(item) for item in decode_json_list(raw)]
        except ValidationError as e:
            raise ValueError(str(e)) from e
    return decode


def fetch_all(
    connection,
    endpoint: str,
    model: Type[ModelT],
    page_size: Optional[int] = None,
    filter: str = "",
    mode: PagingMode = PagingMode.OFFSET,
    verbose: bool = False,
) -> List[ModelT]:
    """
    Fetch every item of a paginated collection.

    Raises:
        CountUnavailableError: The collection size could not be determined
        DispatchError: A page request failed on every attempt
    """
    connection.push_many(plan_resource_pages(connection, endpoint, page_size, filter, mode))
    raw_pages = connection.execute_queue(strict=True, verbose=verbose)
    return merge_pages(raw_pages, _decoder(model))


def get_all_products(connection, page_size: Optional[int] = None, verbose: bool = False) -> List[Product]:
    """Return all products from the backend."""
    return fetch_all(connection, PRODUCTS, Product, page_size, verbose=verbose)


def query_categories(connection, search: str = "", page_size: int = 10) -> List[Category]:
    """
    Return all categories, optionally narrowed by an extra query string
    such as ``"&search=shoes"``. The category endpoint pages by page number.
    """
    return fetch_all(connection, CATEGORIES, Category, page_size, filter=search, mode=PagingMode.PAGE)


def get_all_attributes(connection, page_size: Optional[int] = None) -> List[Attribute]:
    return fetch_all(connection, ATTRIBUTES, Attribute, page_size)


def _run_batches(connection, endpoint: str, verbose: bool, **operations) -> List[Optional[bytes]]:
    requests = plan_batches(batch_endpoint(endpoint), connection.batch_stride_size, **operations)
    connection.push_many(requests)
    return connection.execute_queue(strict=True, verbose=verbose)


def create_products(connection, products: Sequence[Product], verbose: bool = False) -> List[Optional[bytes]]:
    """Create products through batch requests. Products must not carry ids."""
    return _run_batches(connection, PRODUCTS, verbose, create=products)


def update_products(connection, products: Sequence[Product], verbose: bool = False) -> List[Optional[bytes]]:
    """Update products through batch requests. Every product needs an id."""
    return _run_batches(connection, PRODUCTS, verbose, update=products)


def delete_products(connection, ids: Sequence[int], verbose: bool = False) -> List[Optional[bytes]]:
    return _run_batches(connection, PRODUCTS, verbose, delete=ids)


def purge_products(connection, verbose: bool = False) -> int:
    """
    Delete every product from the backend.

    Image assets stay on the server. Returns the number of products targeted.
    """
    products = get_all_products(connection, verbose=verbose)
    ids = [p.get_id() for p in products if p.get_id()]
    if not ids:
        logger.info("No products to purge")
        return 0
    delete_products(connection, ids, verbose=verbose)
    logger.info(f"Purged {len(ids)} products")
    return len(ids)


def create_category(connection, category: Category) -> Category:
    """Create a single category and return it as stored by the backend."""
    connection.push(PostRequest(CATEGORIES, category))
    (raw,) = connection.execute_queue(strict=True)
    return Category.model_validate_json(raw)
