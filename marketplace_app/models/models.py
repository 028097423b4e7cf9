from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.get_db import Base

from .enums import (
    AvailabilityStatus,
    ComplaintStatus,
    EnquiryType,
    PaymentStatus,
    PropertyPurpose,
    PropertyTypes,
    RentalStatus,
    RentRequestStatus,
    TransactionKind,
    UserRole,
)
from .utils import utcnow

MONEY = Numeric(14, 2)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    company_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False), nullable=False, default=UserRole.BUYER
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    properties: Mapped[List["Property"]] = relationship(
        "Property",
        back_populates="owner",
        foreign_keys="Property.owner_id",
    )


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        Index("idx_property_city", "city"),
        Index("idx_property_purpose", "purpose"),
        Index("idx_property_type", "property_type"),
        Index("idx_property_status", "availability_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    buyer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(300), unique=True, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    property_type: Mapped[Optional[PropertyTypes]] = mapped_column(
        Enum(PropertyTypes, native_enum=False), nullable=True
    )
    purpose: Mapped[Optional[PropertyPurpose]] = mapped_column(
        Enum(PropertyPurpose, native_enum=False), nullable=True
    )
    price: Mapped[Optional[Decimal]] = mapped_column(MONEY, nullable=True)
    rent_amount: Mapped[Optional[Decimal]] = mapped_column(MONEY, nullable=True)
    deposit_amount: Mapped[Optional[Decimal]] = mapped_column(MONEY, nullable=True)
    area_sqft: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    area: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    availability_status: Mapped[AvailabilityStatus] = mapped_column(
        Enum(AvailabilityStatus, native_enum=False),
        nullable=False,
        default=AvailabilityStatus.AVAILABLE,
    )
    rental_status: Mapped[RentalStatus] = mapped_column(
        Enum(RentalStatus, native_enum=False),
        nullable=False,
        default=RentalStatus.AVAILABLE,
    )
    sold_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    owner: Mapped["User"] = relationship(
        "User", back_populates="properties", foreign_keys=[owner_id]
    )
    buyer: Mapped[Optional["User"]] = relationship("User", foreign_keys=[buyer_id])


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("payable_amount > 0", name="ck_payments_payable_positive"),
        CheckConstraint("total_amount >= 0", name="ck_payments_total_non_negative"),
        CheckConstraint(
            "remaining_amount >= 0", name="ck_payments_remaining_non_negative"
        ),
        Index(
            "uq_payments_purchase_success_per_property",
            "property_id",
            unique=True,
            postgresql_where=text("kind = 'PURCHASE' AND status = 'SUCCESS'"),
            sqlite_where=text("kind = 'PURCHASE' AND status = 'SUCCESS'"),
        ),
        Index("idx_payments_payer_property", "payer_id", "property_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gateway_order_id: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, index=True
    )
    gateway_payment_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True
    )
    gateway_signature: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    payer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"), nullable=False
    )
    owner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )
    kind: Mapped[TransactionKind] = mapped_column(
        Enum(TransactionKind, native_enum=False), nullable=False
    )
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, native_enum=False),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    payable_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    remaining_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="INR")
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    billing_period: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    next_due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    receipt_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    payer: Mapped["User"] = relationship("User", foreign_keys=[payer_id])
    owner: Mapped[Optional["User"]] = relationship("User", foreign_keys=[owner_id])
    property: Mapped["Property"] = relationship("Property")


class RentSubscription(Base):
    __tablename__ = "rent_subscriptions"
    __table_args__ = (
        UniqueConstraint("renter_id", "property_id", name="uq_rent_subscription_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    renter_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"), nullable=False
    )
    owner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    monthly_rent: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    next_payment_due: Mapped[date] = mapped_column(Date, nullable=False)
    last_payment_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    renter: Mapped["User"] = relationship("User", foreign_keys=[renter_id])
    owner: Mapped[Optional["User"]] = relationship("User", foreign_keys=[owner_id])
    property: Mapped["Property"] = relationship("Property")


class RentRequest(Base):
    __tablename__ = "rent_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"), nullable=False, index=True
    )
    applicant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    monthly_rent: Mapped[Optional[Decimal]] = mapped_column(MONEY, nullable=True)
    deposit: Mapped[Optional[Decimal]] = mapped_column(MONEY, nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[RentRequestStatus] = mapped_column(
        Enum(RentRequestStatus, native_enum=False),
        nullable=False,
        default=RentRequestStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    property: Mapped["Property"] = relationship("Property")


class Enquiry(Base):
    __tablename__ = "enquiries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    enquiry_type: Mapped[EnquiryType] = mapped_column(
        Enum(EnquiryType, native_enum=False), nullable=False, default=EnquiryType.VISIT
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class Complaint(Base):
    __tablename__ = "complaints"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ComplaintStatus] = mapped_column(
        Enum(ComplaintStatus, native_enum=False),
        nullable=False,
        default=ComplaintStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
