"""
Tests for the pagination and batch planners.
"""

import json

import pytest

from woocommerce_client import (
    BatchPostRequest,
    ConfigurationError,
    CountUnavailableError,
    GetRequest,
    PagingMode,
    Product,
    merge_pages,
    plan_batches,
    plan_pages,
    plan_resource_pages,
)
from woocommerce_client.planners import count_endpoint


PRODUCTS = "/wp-json/wc/v3/products"
CATEGORIES = "/wp-json/wc/v3/products/categories"


class TestPlanPages:

    def test_offsets_cover_collection(self):
        requests = plan_pages(25, PRODUCTS, 10)

        assert all(isinstance(r, GetRequest) for r in requests)
        assert [r.endpoint for r in requests] == [
            f"{PRODUCTS}?offset=0&per_page=10",
            f"{PRODUCTS}?offset=10&per_page=10",
            f"{PRODUCTS}?offset=20&per_page=10",
        ]

    def test_page_numbers_for_page_mode(self):
        requests = plan_pages(25, CATEGORIES, 10, mode=PagingMode.PAGE)

        assert [r.endpoint for r in requests] == [
            f"{CATEGORIES}?per_page=10&page=1",
            f"{CATEGORIES}?per_page=10&page=2",
            f"{CATEGORIES}?per_page=10&page=3",
        ]

    def test_page_size_clamped_to_total(self):
        requests = plan_pages(5, PRODUCTS, 10)
        assert [r.endpoint for r in requests] == [f"{PRODUCTS}?offset=0&per_page=5"]

    def test_exact_multiple(self):
        assert len(plan_pages(30, PRODUCTS, 10)) == 3

    def test_empty_collection(self):
        assert plan_pages(0, PRODUCTS, 10) == []

    def test_filter_appended_to_every_page(self):
        requests = plan_pages(3, CATEGORIES, 2, filter="&search=shoes", mode=PagingMode.PAGE)
        assert [r.endpoint for r in requests] == [
            f"{CATEGORIES}?per_page=2&page=1&search=shoes",
            f"{CATEGORIES}?per_page=2&page=2&search=shoes",
        ]

    def test_endpoint_with_existing_query(self):
        requests = plan_pages(1, f"{PRODUCTS}?status=draft", 10)
        assert requests[0].endpoint == f"{PRODUCTS}?status=draft&offset=0&per_page=1"

    @pytest.mark.parametrize("page_size", [0, -5])
    def test_invalid_page_size(self, page_size):
        with pytest.raises(ConfigurationError):
            plan_pages(10, PRODUCTS, page_size)

    def test_count_endpoint(self):
        assert count_endpoint(PRODUCTS) == f"{PRODUCTS}?per_page=1"
        assert count_endpoint(CATEGORIES, "&search=x") == f"{CATEGORIES}?per_page=1&search=x"


class TestPlanResourcePages:

    def test_counts_then_plans(self, connection, transport):
        requests = plan_resource_pages(connection, PRODUCTS, 10)

        assert len(requests) == 3
        assert transport.call_count == 1
        method, url, _ = transport.calls[0]
        assert method == "GET"
        assert url.startswith(f"https://shop.example.com{PRODUCTS}?per_page=1&consumer_key=")

    def test_default_page_size_from_config(self, connection):
        requests = plan_resource_pages(connection, PRODUCTS)
        assert [r.endpoint for r in requests] == [f"{PRODUCTS}?offset=0&per_page=25"]

    def test_missing_count_header(self, connection, transport):
        transport.total = None
        with pytest.raises(CountUnavailableError):
            plan_resource_pages(connection, PRODUCTS, 10)

    def test_does_not_touch_queue(self, connection):
        plan_resource_pages(connection, PRODUCTS, 10)
        assert connection.queue == ()


class TestMergePages:

    def test_concatenates_in_order(self):
        pages = [b'[{"id": 1}, {"id": 2}]', b'[{"id": 3}]']
        assert [item["id"] for item in merge_pages(pages)] == [1, 2, 3]

    def test_skips_empty_and_invalid_pages(self, caplog):
        pages = [b'[{"id": 1}]', None, b"", b"<html>oops</html>", b'{"id": 9}', b'[{"id": 2}]']
        with caplog.at_level("WARNING"):
            merged = merge_pages(pages)

        assert [item["id"] for item in merged] == [1, 2]
        assert "Page #3" in caplog.text

    def test_custom_decoder(self):
        pages = [json.dumps([{"id": 5, "name": "Mug"}]).encode()]
        merged = merge_pages(pages, lambda raw: [Product.model_validate(p) for p in json.loads(raw)])
        assert merged[0].name == "Mug"


class TestPlanBatches:

    def test_delete_chunks(self):
        ids = list(range(1, 38))
        requests = plan_batches("/p/batch", 16, delete=ids)

        assert [len(r.delete) for r in requests] == [16, 16, 5]
        assert [i for r in requests for i in r.delete] == ids
        assert all(isinstance(r, BatchPostRequest) and r.endpoint == "/p/batch" for r in requests)

    def test_single_partial_chunk(self):
        requests = plan_batches("/p/batch", 16, delete=[7, 8])
        assert len(requests) == 1
        assert requests[0].delete == (7, 8)

    def test_exact_chunk_boundary(self):
        requests = plan_batches("/p/batch", 4, delete=range(8))
        assert [len(r) for r in requests] == [4, 4]

    def test_create_and_update_kept_separate(self):
        create = [Product(name=f"new-{i}") for i in range(3)]
        update = [Product(id=i, name=f"upd-{i}") for i in range(1, 4)]
        requests = plan_batches("/p/batch", 2, create=create, update=update)

        assert [(len(r.create), len(r.update)) for r in requests] == [(2, 0), (1, 0), (0, 2), (0, 1)]
        assert [p.name for r in requests for p in r.create] == ["new-0", "new-1", "new-2"]

    def test_nothing_to_do(self):
        assert plan_batches("/p/batch", 16) == []

    def test_invalid_chunk_size(self):
        with pytest.raises(ConfigurationError):
            plan_batches("/p/batch", 0, delete=[1])
