# acaishop/domain/schemas.py
from datetime import date as Date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# stores / config
# ---------------------------------------------------------------------------

class StoreCreate(BaseModel):
    """Schema for creating a tenant store."""

    slug: str = Field(..., min_length=2, max_length=80, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    name: str = Field(..., min_length=1, max_length=120)


class StoreOut(BaseModel):
    id: str
    slug: str
    name: str
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


HOURS_PATTERN = r"^\d{1,2}:\d{2} - \d{1,2}:\d{2}$"


class DayHours(BaseModel):
    open: bool = False
    hours: Optional[str] = Field(None, pattern=HOURS_PATTERN)


class SpecialDate(BaseModel):
    date: Date
    open: bool = False
    hours: Optional[str] = Field(None, pattern=HOURS_PATTERN)
    description: str = ""

    @model_validator(mode="after")
    def open_needs_hours(self):
        if self.open and not self.hours:
            raise ValueError("Informe o horário da data especial aberta")
        return self


WEEK_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class StoreConfigIn(BaseModel):
    """Schema for saving store configuration (admin)."""

    name: str = Field(..., min_length=1, max_length=120)
    logo_url: str = ""
    theme_color: str = Field("#8B5CF6", pattern=r"^#[0-9a-fA-F]{6}$")
    whatsapp_number: Optional[str] = None
    pix_key: Optional[str] = None
    delivery_fee: Decimal = Field(Decimal("0.00"), ge=0)
    is_open: bool = True
    operating_hours: Dict[str, DayHours] = Field(default_factory=dict)
    special_dates: List[SpecialDate] = Field(default_factory=list)

    @field_validator("operating_hours")
    @classmethod
    def known_days(cls, value: Dict[str, DayHours]):
        unknown = set(value) - set(WEEK_DAYS)
        if unknown:
            raise ValueError(f"Dias desconhecidos: {', '.join(sorted(unknown))}")
        return value


class StoreConfigOut(StoreConfigIn):
    store_id: str
    next_order_number: int
    last_updated: datetime

    model_config = ConfigDict(from_attributes=True)


class StoreStatusOut(BaseModel):
    is_open: bool
    message: str
    next_opening: Optional[str] = None
    status_text: str
    hours_summary: str


# ---------------------------------------------------------------------------
# catalog
# ---------------------------------------------------------------------------

class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    order: int = 0
    active: bool = True


class CategoryOut(CategoryIn):
    id: int

    model_config = ConfigDict(from_attributes=True)


class ProductSize(BaseModel):
    size: str = Field(..., min_length=1, max_length=60)
    price: Decimal = Field(..., ge=0)


class ProductIn(BaseModel):
    """Schema for creating/updating a product."""

    name: str = Field(..., min_length=1, max_length=160)
    description: str = ""
    image: str = ""
    sizes: List[ProductSize] = Field(..., min_length=1)
    category_id: int = Field(..., gt=0)
    active: bool = True
    hidden: bool = False
    needs_spoon: bool = False
    allowed_additionals: Optional[List[int]] = None
    table_sizes: Optional[List[ProductSize]] = None


class ProductOut(ProductIn):
    id: int
    category_name: str = ""
    min_price: Decimal
    price_label: str


class VisibilityIn(BaseModel):
    hidden: bool


class AdditionalCategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    order: int = 0
    active: bool = True
    selection_limit: Optional[int] = Field(None, gt=0)


class AdditionalCategoryOut(AdditionalCategoryIn):
    id: int


class AdditionalIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    price: Decimal = Field(Decimal("0.00"), ge=0)
    category_id: int = Field(..., gt=0)
    active: bool = True
    image: str = ""


class AdditionalOut(AdditionalIn):
    id: int
    category_name: str = ""
    price_label: str


class AdditionalGroupOut(BaseModel):
    category: AdditionalCategoryOut
    additionals: List[AdditionalOut]


class AdditionalsQuoteIn(BaseModel):
    size: str = Field(..., min_length=1)
    additional_ids: List[int] = Field(default_factory=list)


class SelectedAdditionalOut(BaseModel):
    id: int
    name: str
    price: Decimal
    quantity: int


class SelectedGroupOut(BaseModel):
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    additionals: List[SelectedAdditionalOut]


class AdditionalsQuoteOut(BaseModel):
    size: str
    size_price: Decimal
    has_free_additionals: bool
    additionals_total: Decimal
    line_unit_price: Decimal
    count_text: str
    groups: List[SelectedGroupOut]


# ---------------------------------------------------------------------------
# cart
# ---------------------------------------------------------------------------

class CartAdditional(BaseModel):
    id: int
    name: str
    price: Decimal
    quantity: int = 1


class CartItemIn(BaseModel):
    """Prices are always taken from the catalog, never from the client."""

    product_id: int = Field(..., gt=0)
    size: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0)
    additional_ids: List[int] = Field(default_factory=list)


class CartQuantityIn(BaseModel):
    quantity: int


class CartItemOut(BaseModel):
    id: int
    product_id: int
    name: str
    price: Decimal
    quantity: int
    image: str = ""
    size: str
    additionals: List[CartAdditional]
    category_name: Optional[str] = None
    line_total: Decimal


class CartOut(BaseModel):
    session_id: str
    items: List[CartItemOut]
    total: Decimal
    item_count: int


# ---------------------------------------------------------------------------
# orders
# ---------------------------------------------------------------------------

ORDER_STATUSES = (
    "new",
    "pending",
    "pending_payment",
    "paid",
    "payment_failed",
    "preparing",
    "ready",
    "delivering",
    "delivered",
    "completed",
    "cancelled",
)


class AddressIn(BaseModel):
    street: str = Field(..., min_length=1)
    number: str = Field(..., min_length=1)
    complement: Optional[str] = None
    neighborhood: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2)
    zip_code: Optional[str] = None
    reference: Optional[str] = None


class CheckoutIn(BaseModel):
    """Delivery orders need an address; table orders name the table instead."""

    customer_name: str = Field(..., min_length=1, max_length=160)
    customer_phone: str = Field(..., min_length=8, max_length=32)
    address: Optional[AddressIn] = None
    table_number: Optional[int] = Field(None, gt=0)
    payment_method: str = Field(..., min_length=1, max_length=40)

    @model_validator(mode="after")
    def address_or_table(self):
        if self.address is None and self.table_number is None:
            raise ValueError("Informe o endereço de entrega ou a mesa")
        return self


class OrderItemOut(BaseModel):
    product_id: int
    name: str
    price: Decimal
    quantity: int
    size: str
    additionals: List[CartAdditional] = Field(default_factory=list)


class OrderOut(BaseModel):
    id: int
    order_number: int
    customer_name: str
    customer_phone: str
    address: Dict[str, Any]
    items: List[OrderItemOut]
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    order_type: str = "delivery"
    table_number: Optional[int] = None
    payment_method: str
    status: str
    payment_status: Optional[str] = None
    payment_id: Optional[str] = None
    payment_approved_at: Optional[datetime] = None
    printed: bool
    notified: bool
    date: datetime


class OrderStatusIn(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, value: str):
        # "canceled" shows up from older clients
        value = "cancelled" if value == "canceled" else value
        if value not in ORDER_STATUSES:
            raise ValueError(f"Status inválido: {value}")
        return value


# ---------------------------------------------------------------------------
# payments
# ---------------------------------------------------------------------------

class Identification(BaseModel):
    type: str = "CPF"
    number: str


class PayerIn(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    identification: Optional[Identification] = None


class PixPaymentIn(BaseModel):
    order_id: int = Field(..., gt=0)
    payer: PayerIn


class CardPaymentIn(BaseModel):
    order_id: int = Field(..., gt=0)
    token: str = Field(..., min_length=1)
    payment_method_id: str = Field(..., min_length=1)
    installments: int = Field(1, ge=1, le=12)
    issuer_id: Optional[str] = None
    payer: PayerIn


class PreferenceIn(BaseModel):
    order_id: int = Field(..., gt=0)
    payer: Optional[PayerIn] = None


class PaymentCheckIn(BaseModel):
    payment_id: Optional[str] = None
    order_id: Optional[int] = None


# ---------------------------------------------------------------------------
# notifications / push
# ---------------------------------------------------------------------------

class NotificationIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=160)
    message: str = Field(..., min_length=1)
    type: str = "info"
    active: bool = True
    start_date: datetime
    end_date: datetime
    priority: int = 0


class NotificationOut(NotificationIn):
    id: int
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PushKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionIn(BaseModel):
    endpoint: str = Field(..., min_length=1)
    keys: PushKeys
    role: str = Field("customer", pattern=r"^(admin|customer)$")


class PushSendIn(BaseModel):
    title: str = ""
    body: str = ""
    icon: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    role: str = Field("admin", pattern=r"^(admin|customer)$")


# ---------------------------------------------------------------------------
# reports
# ---------------------------------------------------------------------------

class SalesMetrics(BaseModel):
    total_sales: Decimal
    total_orders: int
    average_order_value: Decimal
    total_delivery_fees: Decimal


class PeriodSales(BaseModel):
    date: str
    sales: Decimal
    orders: int


class ProductSales(BaseModel):
    product_name: str
    total_quantity: int
    total_revenue: Decimal
    order_count: int


class PaymentMethodStats(BaseModel):
    method: str
    count: int
    percentage: float
    total_amount: Decimal


class SalesReportOut(BaseModel):
    metrics: SalesMetrics
    daily_sales: List[PeriodSales]
    top_products: List[ProductSales]
    payment_methods: List[PaymentMethodStats]
    recent_orders: List[OrderOut]


# ---------------------------------------------------------------------------
# tables (dine-in)
# ---------------------------------------------------------------------------

class TableIn(BaseModel):
    number: int = Field(..., gt=0)
    name: Optional[str] = Field(None, max_length=80)
    active: bool = True


class TableUpdate(BaseModel):
    number: Optional[int] = Field(None, gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=80)
    active: Optional[bool] = None


class TableOut(BaseModel):
    id: int
    number: int
    name: str
    active: bool
    qr_code: str
    url: str
    created_at: datetime
    updated_at: datetime


class TableStatsOut(BaseModel):
    total: int
    active: int
    inactive: int
    with_orders: int


class WhatsAppLinkOut(BaseModel):
    phone: str
    message: str
    url: str
