from enum import Enum


class UserRole(str, Enum):
    BUYER = "BUYER"
    BUILDER = "BUILDER"
    ADMIN = "ADMIN"


class TransactionKind(str, Enum):
    PURCHASE = "PURCHASE"
    RENT = "RENT"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PropertyPurpose(str, Enum):
    BUY = "BUY"
    RENT = "RENT"


class PropertyTypes(str, Enum):
    APARTMENT = "APARTMENT"
    VILLA = "VILLA"
    HOUSE = "HOUSE"
    FARMHOUSE = "FARMHOUSE"
    GUEST_HOUSE = "GUEST_HOUSE"
    COMMERCIAL = "COMMERCIAL"
    OFFICE = "OFFICE"
    INDUSTRIAL = "INDUSTRIAL"
    WAREHOUSE = "WAREHOUSE"
    PLOT = "PLOT"
    AGRICULTURAL_LAND = "AGRICULTURAL_LAND"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    SOLD = "SOLD"
    RENTED = "RENTED"


class RentalStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"


class RentRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ComplaintStatus(str, Enum):
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"


class EnquiryType(str, Enum):
    BUY = "BUY"
    RENT = "RENT"
    VISIT = "VISIT"
