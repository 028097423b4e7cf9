from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from models.enums import (
    AvailabilityStatus,
    PaymentStatus,
    PropertyPurpose,
    PropertyTypes,
    RentalStatus,
    RentRequestStatus,
    TransactionKind,
    UserRole,
)


class UserBriefOut(BaseModel):
    id: int
    full_name: str
    email: str
    phone_number: Optional[str] = None
    company_name: Optional[str] = None
    role: UserRole

    model_config = {"from_attributes": True}


class PropertyBriefOut(BaseModel):
    id: int
    title: str
    slug: Optional[str] = None
    city: str
    area: str
    purpose: Optional[PropertyPurpose] = None
    property_type: Optional[PropertyTypes] = None
    price: Optional[Decimal] = None
    rent_amount: Optional[Decimal] = None
    availability_status: AvailabilityStatus
    rental_status: RentalStatus
    image_url: Optional[str] = None
    is_verified: bool
    owner_id: int

    model_config = {"from_attributes": True}


class PaymentOut(BaseModel):
    id: int
    gateway_order_id: str
    gateway_payment_id: Optional[str] = None
    kind: TransactionKind
    status: PaymentStatus
    payable_amount: Decimal
    total_amount: Decimal
    remaining_amount: Decimal
    currency: str
    payment_date: Optional[datetime] = None
    billing_period: Optional[str] = None
    next_due_date: Optional[date] = None
    receipt_url: Optional[str] = None
    failure_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    payer: UserBriefOut
    property: PropertyBriefOut
    owner: Optional[UserBriefOut] = None

    model_config = {"from_attributes": True}


class CreateOrderSchema(BaseModel):
    payer_id: int = Field(..., gt=0, validation_alias=AliasChoices("payer_id", "userId"))
    property_id: int = Field(
        ..., gt=0, validation_alias=AliasChoices("property_id", "propertyId")
    )


class VerifyPaymentSchema(BaseModel):
    gateway_order_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("gateway_order_id", "razorpay_order_id"),
    )
    gateway_transaction_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("gateway_transaction_id", "razorpay_payment_id"),
    )
    signature: Optional[str] = Field(
        None, validation_alias=AliasChoices("signature", "razorpay_signature")
    )


class PaymentFailedSchema(BaseModel):
    gateway_order_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("gateway_order_id", "razorpay_order_id"),
    )
    reason: Optional[str] = Field(None, max_length=500)


class BookingCheckOut(BaseModel):
    isBooked: bool


class MessageOut(BaseModel):
    message: str


class PropertyCreate(BaseModel):
    owner_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    property_type: Optional[PropertyTypes] = None
    purpose: Optional[PropertyPurpose] = None
    price: Optional[Decimal] = Field(None, ge=0)
    rent_amount: Optional[Decimal] = Field(None, ge=0)
    deposit_amount: Optional[Decimal] = Field(None, ge=0)
    area_sqft: Optional[int] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    city: str = Field(..., min_length=2, max_length=120)
    area: str = Field(..., min_length=2, max_length=255)
    image_url: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("title", "city", "area")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be blank.")
        return value

    @model_validator(mode="after")
    def check_amount_for_purpose(self):
        if self.purpose == PropertyPurpose.RENT and self.rent_amount is None:
            raise ValueError("Rent amount is required for rental listings.")
        if self.purpose == PropertyPurpose.BUY and self.price is None:
            raise ValueError("Price is required for sale listings.")
        return self


class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    property_type: Optional[PropertyTypes] = None
    purpose: Optional[PropertyPurpose] = None
    price: Optional[Decimal] = Field(None, ge=0)
    rent_amount: Optional[Decimal] = Field(None, ge=0)
    deposit_amount: Optional[Decimal] = Field(None, ge=0)
    area_sqft: Optional[int] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    city: Optional[str] = Field(None, min_length=2, max_length=120)
    area: Optional[str] = Field(None, min_length=2, max_length=255)
    image_url: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class AvailabilityUpdate(BaseModel):
    availability_status: AvailabilityStatus


class PropertyVerify(BaseModel):
    is_verified: bool = True


class PropertySummaryOut(BaseModel):
    id: int
    title: str
    slug: Optional[str] = None
    price: Optional[Decimal] = None
    rent_amount: Optional[Decimal] = None
    city: str
    area: str
    thumbnail: Optional[str] = Field(
        None, validation_alias=AliasChoices("thumbnail", "image_url")
    )
    property_type: Optional[PropertyTypes] = None
    purpose: Optional[PropertyPurpose] = None
    availability_status: AvailabilityStatus
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area_sqft: Optional[int] = None
    owner: UserBriefOut
    is_verified: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    model_config = {"from_attributes": True}


class PropertyOut(BaseModel):
    id: int
    title: str
    slug: Optional[str] = None
    description: Optional[str] = None
    property_type: Optional[PropertyTypes] = None
    purpose: Optional[PropertyPurpose] = None
    price: Optional[Decimal] = None
    rent_amount: Optional[Decimal] = None
    deposit_amount: Optional[Decimal] = None
    area_sqft: Optional[int] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    city: str
    area: str
    image_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    availability_status: AvailabilityStatus
    rental_status: RentalStatus
    sold_date: Optional[datetime] = None
    is_verified: bool
    created_at: datetime
    updated_at: datetime
    owner: UserBriefOut
    buyer: Optional[UserBriefOut] = None

    model_config = {"from_attributes": True}


class PropertyPageOut(BaseModel):
    items: List[PropertySummaryOut] = Field(default_factory=list)
    total: int
    page: int
    per_page: int
    pages: int


class RentSubscriptionOut(BaseModel):
    id: int
    renter_id: int
    owner_id: Optional[int] = None
    monthly_rent: Decimal
    start_date: date
    next_payment_due: date
    last_payment_id: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    property: PropertyBriefOut
    owner: Optional[UserBriefOut] = None

    model_config = {"from_attributes": True}


class RentRequestCreate(BaseModel):
    property_id: int = Field(..., gt=0)
    applicant_name: str = Field(..., min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: EmailStr
    monthly_rent: Optional[Decimal] = Field(None, ge=0)
    deposit: Optional[Decimal] = Field(None, ge=0)
    message: Optional[str] = Field(None, max_length=2000)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RentRequestStatusUpdate(BaseModel):
    status: RentRequestStatus


class RentRequestOut(BaseModel):
    id: int
    property_id: int
    applicant_name: str
    phone: Optional[str] = None
    email: str
    monthly_rent: Optional[Decimal] = None
    deposit: Optional[Decimal] = None
    message: Optional[str] = None
    status: RentRequestStatus
    created_at: datetime
    property: PropertyBriefOut

    model_config = {"from_attributes": True}
