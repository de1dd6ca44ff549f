# src/api/crud.py
from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional

import aiosqlite

from api import cache
from api.client import ApiError, request
from api.models import (
    Category,
    DashboardCounts,
    Order,
    OrderReceipt,
    Product,
    User,
)
from store.cart import CartLine
from utils.logger import get_logger

_logger = get_logger(__name__)


def _as_list(payload) -> list:
    return payload if isinstance(payload, list) else []


# ---------------------------
# Auth & Registration
# ---------------------------


async def login(email: str, password: str) -> str:
    """Exchange credentials for a bearer token."""
    try:
        body = await request("POST", "/login", json={"email": email, "sandi": password})
    except ApiError as e:
        if e.status_code == 401:
            raise ApiError("Wrong email or password.", 401) from e
        raise
    token = body.get("token") if isinstance(body, dict) else None
    if not token:
        raise ApiError("No token received from server.")
    return token


async def register(name: str, email: str, password: str) -> None:
    """Create a customer account."""
    await request(
        "POST", "/pengguna", json={"nama": name, "email": email, "sandi": password}
    )


# ---------------------------
# Products
# ---------------------------


async def list_products() -> List[Product]:
    """
    Network first; on a transport failure fall back to the last cached list
    if it is recent enough. Errors answered by the server are not masked.
    """
    try:
        payload = await request("GET", "/produk")
    except ApiError as e:
        if not e.unreachable:
            raise
        try:
            payload = await cache.load_products()
        except (OSError, aiosqlite.Error) as cache_error:
            _logger.warning(f"Reading the products cache failed: {cache_error}")
            payload = None
        if payload is None:
            raise
        _logger.warning("Backend unreachable, serving cached products.")
    else:
        try:
            await cache.store_products(payload)
        except (OSError, aiosqlite.Error) as cache_error:
            _logger.warning(f"Writing the products cache failed: {cache_error}")
    return [Product.from_api(p) for p in _as_list(payload)]


async def get_product(pid: str) -> Optional[Product]:
    try:
        payload = await request("GET", f"/produk/{pid}")
    except ApiError as e:
        if e.status_code == 404:
            return None
        raise
    return Product.from_api(payload) if payload else None


def product_payload(
    name: str,
    category_id: str,
    description: str,
    price: int,
    stock: int,
    image: str = "",
    size: str = "",
    color: str = "",
) -> Dict[str, object]:
    return {
        "nama": name,
        "kategoriId": category_id,
        "deskripsi": description,
        "harga": price,
        "jumlah": stock,
        "gambar": image,
        "ukuran": size,
        "warna": color,
    }


async def create_product(data: Dict[str, object]) -> Optional[Product]:
    payload = await request("POST", "/produk", json=data)
    return Product.from_api(payload) if isinstance(payload, dict) else None


async def update_product(pid: str, data: Dict[str, object]) -> Optional[Product]:
    payload = await request("PATCH", f"/produk/{pid}", json=data)
    return Product.from_api(payload) if isinstance(payload, dict) else None


async def delete_product(pid: str) -> None:
    await request("DELETE", f"/produk/{pid}")


# ---------------------------
# Categories
# ---------------------------


async def list_categories() -> List[Category]:
    payload = await request("GET", "/kategori")
    return [Category.from_api(c) for c in _as_list(payload)]


async def create_category(name: str) -> None:
    await request("POST", "/kategori", json={"nama": name})


async def update_category(cat_id: str, name: str) -> None:
    await request("PATCH", f"/kategori/{cat_id}", json={"nama": name})


async def delete_category(cat_id: str) -> None:
    await request("DELETE", f"/kategori/{cat_id}")


# ---------------------------
# Users
# ---------------------------


def user_payload(name: str, email: str, role: str, password: str = "") -> Dict[str, str]:
    """Password is only sent when set, so an edit keeps the old one."""
    data = {"nama": name, "email": email, "peran": role}
    if password:
        data["sandi"] = password
    return data


async def list_users() -> List[User]:
    payload = await request("GET", "/pengguna")
    return [User.from_api(u) for u in _as_list(payload)]


async def create_user(data: Dict[str, str]) -> None:
    await request("POST", "/pengguna", json=data)


async def update_user(uid: str, data: Dict[str, str]) -> None:
    await request("PATCH", f"/pengguna/{uid}", json=data)


async def delete_user(uid: str) -> None:
    await request("DELETE", f"/pengguna/{uid}")


# ---------------------------
# Orders & Checkout
# ---------------------------


async def list_orders() -> List[Order]:
    payload = await request("GET", "/pesanan")
    return [Order.from_api(o) for o in _as_list(payload)]


async def get_order(oid: str) -> Optional[Order]:
    """Single order; looked up in the order list, the backend has no detail route."""
    for order in await list_orders():
        if order.id == oid:
            return order
    return None


CHECKOUT_FIELDS = {
    "first_name": "namaDepan",
    "last_name": "namaBelakang",
    "email": "email",
    "phone": "telepon",
    "address": "alamat",
    "city": "kota",
    "province": "provinsi",
    "postal_code": "kodePos",
    "note": "catatan",
}


def order_payload(form: Dict[str, str], lines: Iterable[CartLine]) -> Dict[str, object]:
    payload: Dict[str, object] = {
        api_name: form.get(name, "") for name, api_name in CHECKOUT_FIELDS.items()
    }
    payload["items"] = [{"id": line.id, "jumlah": line.quantity} for line in lines]
    return payload


async def create_order(form: Dict[str, str], lines: Iterable[CartLine]) -> OrderReceipt:
    """
    Create an order for the cart lines. Returns the receipt carrying the
    payment token; the cart itself is left untouched.
    """
    body = await request("POST", "/pesanan", json=order_payload(form, lines))
    receipt = OrderReceipt.from_api(body if isinstance(body, dict) else {})
    if not receipt.token:
        raise ApiError("No payment token received from server.")
    _logger.info(f"Order {receipt.order_id} created")
    return receipt


# ---------------------------
# Dashboard
# ---------------------------


async def dashboard_counts() -> DashboardCounts:
    products, categories, users, orders = await asyncio.gather(
        request("GET", "/produk"),
        request("GET", "/kategori"),
        request("GET", "/pengguna"),
        request("GET", "/pesanan"),
    )
    return DashboardCounts(
        users=len(_as_list(users)),
        products=len(_as_list(products)),
        orders=len(_as_list(orders)),
        categories=len(_as_list(categories)),
    )
