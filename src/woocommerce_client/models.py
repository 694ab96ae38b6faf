"""
Resource schemas for the WooCommerce REST API.

The dispatcher never looks inside these; planners only need ``get_id()`` and
JSON serialization. Fields follow the REST API names and are all optional so
partial payloads (e.g. an update carrying only a price) serialize cleanly with
``exclude_none``.

Reference: https://woocommerce.github.io/woocommerce-rest-api-docs/
"""

from __future__ import annotations
from typing import Optional, List, Dict, Any, Protocol, runtime_checkable
from pydantic import BaseModel, Field, field_validator


@runtime_checkable
class Item(Protocol):
    """Anything that can be created, updated or deleted through a batch request."""

    def get_id(self) -> Optional[int]:
        ...


class WooModel(BaseModel):
    """Common base: tolerant of unknown fields returned by the backend."""

    model_config = {
        "populate_by_name": True,
        "extra": "allow",
    }

    id: Optional[int] = None

    def get_id(self) -> Optional[int]:
        return self.id or None

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict without unset or null fields."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class Image(WooModel):
    date_created_gmt: Optional[str] = None
    date_modified_gmt: Optional[str] = None
    src: Optional[str] = None
    name: Optional[str] = None
    alt: Optional[str] = None


class Tag(WooModel):
    name: Optional[str] = None
    slug: Optional[str] = None


class Dimension(BaseModel):
    length: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None


class PriceOverride(BaseModel):
    """Per-currency price used by the WPML multi-currency extension."""
    regular_price: Optional[str] = None
    sale_price: Optional[str] = None


class Link(BaseModel):
    href: Optional[str] = None


class CategoryLinks(BaseModel):
    self_: List[Link] = Field(default_factory=list, alias="self")
    collection: List[Link] = Field(default_factory=list)
    up: List[Link] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class Attribute(WooModel):
    """Product attribute, either global (id set) or local to one product."""
    name: Optional[str] = None
    option: Optional[str] = None
    options: Optional[List[str]] = None
    slug: Optional[str] = None
    visible: Optional[bool] = None
    type: Optional[str] = None


class Category(WooModel):
    name: str = ""
    alt: Optional[str] = None
    slug: Optional[str] = None
    parent: Optional[int] = None
    description: Optional[str] = None
    image: Optional[Image] = None
    menu_order: Optional[int] = None
    count: Optional[int] = None
    links: Optional[CategoryLinks] = Field(default=None, alias="_links")


class Product(WooModel):
    """
    A catalog product.

    Read-only fields (permalink, dates, rating, ...) are accepted on decode and
    dropped by the backend if sent back.
    """
    sku: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    permalink: Optional[str] = None
    date_created_gmt: Optional[str] = None
    date_modified_gmt: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    featured: Optional[bool] = None
    catalog_visibility: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    regular_price: Optional[str] = None
    sale_price: Optional[str] = None
    date_on_sale_from: Optional[str] = None
    date_on_sale_from_gmt: Optional[str] = None
    date_on_sale_to: Optional[str] = None
    date_on_sale_to_gmt: Optional[str] = None
    on_sale: Optional[bool] = None
    total_sales: Optional[int] = None
    external_url: Optional[str] = None
    button_text: Optional[str] = None
    tax_status: Optional[str] = None
    tax_class: Optional[str] = None
    stock_quantity: Optional[int] = None
    stock_status: Optional[str] = None
    sold_individually: Optional[bool] = None
    weight: Optional[str] = None
    dimensions: Optional[Dimension] = None
    shipping_required: Optional[bool] = None
    reviews_allowed: Optional[bool] = None
    average_rating: Optional[str] = None
    rating_count: Optional[int] = None
    related_ids: Optional[List[int]] = None
    upsell_ids: Optional[List[int]] = None
    cross_sell_ids: Optional[List[int]] = None
    parent_id: Optional[int] = None
    categories: Optional[List[Category]] = None
    tags: Optional[List[Tag]] = None
    images: Optional[List[Image]] = None
    default_attributes: Optional[List[Dict[str, Any]]] = None
    variations: Optional[List[int]] = None
    grouped_products: Optional[List[int]] = None
    menu_order: Optional[int] = None
    meta_data: Optional[List[Dict[str, Any]]] = None
    attributes: Optional[List[Attribute]] = None
    lang: Optional[str] = None
    custom_prices: Optional[Dict[str, PriceOverride]] = None

    @field_validator("total_sales", "stock_quantity", mode="before")
    @classmethod
    def parse_loose_int(cls, v: Any) -> Optional[int]:
        """The backend sometimes sends numeric fields as strings."""
        if v is None or v == "":
            return None
        return int(v)

    def add_image(self, url: str, name: str = "", alt: str = "") -> None:
        """Attach an image by URL."""
        if self.images is None:
            self.images = []
        self.images.append(Image(src=url, name=name or None, alt=alt or None))
