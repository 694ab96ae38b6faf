"""
Request planners.

Pagination turns "fetch every item of a collection" into one GET per page,
after reading the collection size from a one-item lookup. Batching splits a
list of create/update/delete operations into fixed-size batch requests.
Both only build request lists; execution belongs to the dispatcher.
"""

from __future__ import annotations
import json
import logging
import math
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .request import BatchPostRequest, GetRequest
from .runtime.errors import ConfigurationError


logger = logging.getLogger(__name__)


class PagingMode(Enum):
    """How a collection endpoint addresses its pages."""
    OFFSET = "offset"
    PAGE = "page"


def _join(endpoint: str, query: str) -> str:
    if not query:
        return endpoint
    return endpoint + ("&" if "?" in endpoint else "?") + query


def _normalize_filter(filter: str) -> str:
    return filter.lstrip("?&")


def count_endpoint(endpoint: str, filter: str = "") -> str:
    """Endpoint asking for a single item, used to read the total-count header."""
    return _join(_join(endpoint, "per_page=1"), _normalize_filter(filter))


def plan_pages(
    total: int,
    endpoint: str,
    page_size: int,
    filter: str = "",
    mode: PagingMode = PagingMode.OFFSET,
) -> List[GetRequest]:
    """
    Build the GET requests covering ``total`` items.

    The page size is clamped to ``total`` so no page is larger than the whole
    collection. Offset mode emits ``offset=0, page_size, 2*page_size, ...``;
    page mode emits ``page=1, 2, 3, ...``. Every request carries the same
    ``per_page``.

    Args:
        total: Number of items in the collection
        endpoint: Collection endpoint without paging parameters
        page_size: Requested items per page
        filter: Extra query string appended to every request
        mode: Offset- or page-number-based paging

    Raises:
        ConfigurationError: page_size below one or negative total
    """
    if page_size < 1:
        raise ConfigurationError(f"page_size must be at least 1, got {page_size}")
    if total < 0:
        raise ConfigurationError(f"total must not be negative, got {total}")
    if total == 0:
        return []

    page_size = min(page_size, total)
    pages = math.ceil(total / page_size)
    extra = _normalize_filter(filter)

    requests = []
    for k in range(pages):
        if mode is PagingMode.PAGE:
            query = f"per_page={page_size}&page={k + 1}"
        else:
            query = f"offset={k * page_size}&per_page={page_size}"
        requests.append(GetRequest(_join(_join(endpoint, query), extra)))
    return requests


def plan_resource_pages(
    connection,
    endpoint: str,
    page_size: Optional[int] = None,
    filter: str = "",
    mode: PagingMode = PagingMode.OFFSET,
) -> List[GetRequest]:
    """
    Count the items behind ``endpoint`` and plan the page requests.

    Raises:
        CountUnavailableError: The count header is missing or malformed
    """
    total = connection.count_items(count_endpoint(endpoint, filter))
    if page_size is None:
        page_size = connection.config.page_size
    requests = plan_pages(total, endpoint, page_size, filter, mode)
    logger.debug(f"{endpoint}: {total} items in {len(requests)} page(s)")
    return requests


def decode_json_list(raw: bytes) -> List[Any]:
    value = json.loads(raw)
    if not isinstance(value, list):
        raise ValueError(f"expected a JSON array, got {type(value).__name__}")
    return value


def merge_pages(
    raw_pages: Sequence[Optional[bytes]],
    decode: Callable[[bytes], Iterable[Any]] = decode_json_list,
) -> List[Any]:
    """
    Concatenate decoded pages in order.

    Empty pages and pages that fail to decode are skipped with a warning
    rather than failing the whole fetch.
    """
    items: List[Any] = []
    for index, raw in enumerate(raw_pages):
        if not raw:
            logger.warning(f"Page #{index} is empty, skipping")
            continue
        try:
            decoded = list(decode(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"Page #{index} could not be decoded, skipping: {e}")
            continue
        items.extend(decoded)
    return items


def _chunks(values: Sequence[Any], size: int) -> Iterable[Sequence[Any]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


def plan_batches(
    endpoint: str,
    chunk_size: int,
    create: Sequence[Any] = (),
    update: Sequence[Any] = (),
    delete: Sequence[int] = (),
) -> List[BatchPostRequest]:
    """
    Split operations into batch requests of at most ``chunk_size`` operations.

    Each operation kind is chunked on its own (creates first, then updates,
    then deletes), preserving the original order; the last chunk of each kind
    may be partial.

    Raises:
        ConfigurationError: chunk_size below one
    """
    if chunk_size < 1:
        raise ConfigurationError(f"chunk_size must be at least 1, got {chunk_size}")

    requests = []
    for chunk in _chunks(list(create), chunk_size):
        requests.append(BatchPostRequest(endpoint, create=tuple(chunk)))
    for chunk in _chunks(list(update), chunk_size):
        requests.append(BatchPostRequest(endpoint, update=tuple(chunk)))
    for chunk in _chunks(list(delete), chunk_size):
        requests.append(BatchPostRequest(endpoint, delete=tuple(chunk)))
    return requests
