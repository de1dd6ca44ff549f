# records as served by the remote API, field names mapped to english
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from store.cart import PLACEHOLDER_IMAGE, ProductSnapshot

ROLE_ADMIN = "ADMIN"
ROLE_CUSTOMER = "PENGGUNA"

PAYMENT_PENDING = "PENDING"
PAYMENT_PAID = "PAID"
PAYMENT_FAILED = "FAILED"


def _to_int(val) -> int:
    try:
        return int(val)
    except (TypeError, ValueError):
        return 0


def _str_or_none(val) -> Optional[str]:
    return str(val) if val not in (None, "") else None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Category":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("nama") or "",
            created_at=data.get("dibuatPada"),
            updated_at=data.get("diperbarui"),
        )


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: int
    stock: int
    image: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    category_id: str = ""
    category: Optional[Category] = None

    @classmethod
    def from_api(cls, data: dict) -> "Product":
        category = data.get("kategori")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("nama") or "",
            description=data.get("deskripsi") or "",
            price=_to_int(data.get("harga")),
            stock=_to_int(data.get("jumlah")),
            image=_str_or_none(data.get("gambar")),
            size=_str_or_none(data.get("ukuran")),
            color=_str_or_none(data.get("warna")),
            category_id=str(data.get("kategoriId") or ""),
            category=Category.from_api(category) if category else None,
        )

    @property
    def category_name(self) -> str:
        return self.category.name if self.category else ""

    @property
    def low_stock(self) -> bool:
        return self.stock < 10

    def to_snapshot(self) -> ProductSnapshot:
        return ProductSnapshot(
            id=self.id,
            name=self.name,
            price=self.price,
            image=self.image or PLACEHOLDER_IMAGE,
            description=self.description,
            category=self.category_name,
            stock=self.stock,
            size=self.size,
            color=self.color,
        )


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: str = ROLE_CUSTOMER
    created_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "User":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("nama") or "",
            email=data.get("email") or "",
            role=data.get("peran") or ROLE_CUSTOMER,
            created_at=data.get("dibuatPada"),
        )


@dataclass(frozen=True)
class OrderItem:
    id: str
    product_id: str
    quantity: int
    price: int  # unit price at time of order
    product_name: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "OrderItem":
        product = data.get("produk") or {}
        return cls(
            id=str(data.get("id", "")),
            product_id=str(data.get("produkId", "")),
            quantity=_to_int(data.get("jumlah")),
            price=_to_int(data.get("harga")),
            product_name=product.get("nama") or "",
        )

    @property
    def subtotal(self) -> int:
        return self.quantity * self.price


@dataclass(frozen=True)
class Order:
    id: str
    first_name: str
    last_name: str
    email: str
    address: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    phone: str = ""
    note: str = ""
    total: int = 0
    payment_status: str = PAYMENT_PENDING
    snap_token: Optional[str] = None
    created_at: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "Order":
        return cls(
            id=str(data.get("id", "")),
            first_name=data.get("namaDepan") or "",
            last_name=data.get("namaBelakang") or "",
            email=data.get("email") or "",
            address=data.get("alamat") or "",
            city=data.get("kota") or "",
            province=data.get("provinsi") or "",
            postal_code=data.get("kodePos") or "",
            phone=data.get("telepon") or "",
            note=data.get("catatan") or "",
            total=_to_int(data.get("totalHarga")),
            payment_status=(data.get("statusPembayaran") or PAYMENT_PENDING).upper(),
            snap_token=data.get("tokenSnap"),
            created_at=data.get("dibuatPada"),
            items=[OrderItem.from_api(i) for i in data.get("itemPesanan") or []],
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class OrderReceipt:
    """Answer to order creation: the token the payment widget needs."""

    order_id: str
    token: str
    redirect_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "OrderReceipt":
        return cls(
            order_id=str(data.get("idPesanan", "")),
            token=data.get("token") or "",
            redirect_url=data.get("redirectUrl"),
        )


@dataclass(frozen=True)
class DashboardCounts:
    users: int
    products: int
    orders: int
    categories: int
