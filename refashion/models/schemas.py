from typing import Literal

from pydantic import BaseModel, Field, field_validator

MAX_IMAGES = 4
PLACEHOLDER_IMAGE = "/images/product-1.jpg"


# --- Session schemas ---

class Session(BaseModel):
    uid: str | None = None
    name: str
    email: str


class AuthRequest(BaseModel):
    action: str
    name: str | None = None
    email: str | None = None
    password: str | None = None
    user: dict | None = None


# --- Product schemas ---

class Product(BaseModel):
    id: str
    name: str
    artisan: str
    price: float
    image: str = PLACEHOLDER_IMAGE
    images: list[str] = Field(default_factory=list, max_length=MAX_IMAGES)
    tag: str | None = None
    description: str
    updated_at: str | None = None


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    artisan: str = Field(min_length=1)
    price: float = Field(gt=0)
    description: str = Field(min_length=1)
    tag: str | None = None
    images: list[str] = Field(default_factory=list)

    @field_validator("images")
    @classmethod
    def truncate_images(cls, v: list[str]) -> list[str]:
        return v[:MAX_IMAGES]

    @field_validator("tag")
    @classmethod
    def blank_tag_is_none(cls, v: str | None) -> str | None:
        return v or None


class MigrationReport(BaseModel):
    status: Literal["migrated", "already_migrated", "partial"]
    uploaded: int = 0
    failed: int = 0


# --- Cart schemas ---

class CartItem(BaseModel):
    id: str
    name: str
    artisan: str
    price: float
    image: str
    quantity: int = Field(default=1, ge=1)


class CartView(BaseModel):
    items: list[CartItem]
    total: float
    count: int


class AddToCartRequest(BaseModel):
    product_id: str


class UpdateQuantityRequest(BaseModel):
    quantity: int


# --- Checkout schemas ---

class CheckoutRequest(BaseModel):
    method: Literal["card", "upi", "netbanking"] = "card"
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str | None = None
    address: str | None = None


class CheckoutResponse(BaseModel):
    order_id: str
    status: str
    method: str
    total: float
    count: int
    items: list[CartItem]


# --- Contact schemas ---

class ContributeForm(BaseModel):
    type: Literal["contribute"]
    name: str
    location: str = ""
    mobile: str = ""
    email: str = ""
    clothesType: str = ""


class CollaborateForm(BaseModel):
    type: Literal["collaborate"]
    name: str
    location: str = ""
    artForms: list[str] = Field(default_factory=list)
    experience: str = ""
    socialMedia: str | None = None
    suggestions: str | None = None
