from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

DeliveryType = Literal["home", "office"]

DELIVERY_TYPES: tuple[DeliveryType, ...] = ("home", "office")


@dataclass
class Category:
    id: int
    name_fr: str
    name_ar: str

    @classmethod
    def from_row(cls, row: Any) -> Category:
        return cls(id=int(row["id"]), name_fr=row["name_fr"], name_ar=row["name_ar"])


@dataclass
class Product:
    id: int
    product_id: str  # public reference code shown to customers
    name: str
    price: int
    category_id: int
    promo_price: int | None = None
    description: str = ""
    images: list[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Any) -> Product:
        promo = row["promo_price"]
        return cls(
            id=int(row["id"]),
            product_id=row["product_id"],
            name=row["name"],
            price=int(row["price"]),
            category_id=int(row["category_id"]),
            promo_price=int(promo) if promo is not None else None,
            description=row["description"] or "",
            images=json.loads(row["images_json"] or "[]"),
        )


@dataclass
class Tariff:
    """Flat delivery fees for one wilaya. Prices are stored as entered (strings)."""

    id: int
    wilaya_code: str | None
    wilaya_name: str | None
    price: str | None = None
    delivery_office_price: str | None = None
    delivery_office_address: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> Tariff:
        return cls(
            id=int(row["id"]),
            wilaya_code=row["wilaya_code"],
            wilaya_name=row["wilaya_name"],
            price=row["price"],
            delivery_office_price=row["delivery_office_price"],
            delivery_office_address=row["delivery_office_address"],
        )


@dataclass
class OrderCreate:
    """Payload handed to the order store on submission."""

    product_ref: int
    product_code: str
    product_name: str
    quantity: int
    full_name: str
    phone_number: str
    selected_wilaya: str
    selected_delivery_type: DeliveryType
    delivery_address: str
    exact_address: str
    order_remarks: str
    delivery_price: int
    total_price: int


@dataclass
class Order:
    id: int
    order_number: str
    product_ref: int
    product_code: str
    product_name: str
    quantity: int
    full_name: str
    phone_number: str
    selected_wilaya: str
    selected_delivery_type: str
    delivery_address: str
    exact_address: str
    order_remarks: str
    delivery_price: int
    total_price: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> Order:
        return cls(
            id=int(row["id"]),
            order_number=row["order_number"],
            product_ref=int(row["product_ref"]),
            product_code=row["product_code"],
            product_name=row["product_name"],
            quantity=int(row["quantity"]),
            full_name=row["full_name"],
            phone_number=row["phone_number"],
            selected_wilaya=row["selected_wilaya"],
            selected_delivery_type=row["selected_delivery_type"],
            delivery_address=row["delivery_address"] or "",
            exact_address=row["exact_address"] or "",
            order_remarks=row["order_remarks"] or "",
            delivery_price=int(row["delivery_price"]),
            total_price=int(row["total_price"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


@dataclass
class StoreSettings:
    id: int
    store_name: str = ""
    phone_number: str = ""
    show_header: bool = True
    fb_pixel_id: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> StoreSettings:
        return cls(
            id=int(row["id"]),
            store_name=row["store_name"] or "",
            phone_number=row["phone_number"] or "",
            show_header=bool(row["show_header"]),
            fb_pixel_id=row["fb_pixel_id"],
        )
