"""initial marketplace schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:12:44.501233

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(14, 2)


def _enum(name, *values):
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("company_name", sa.String(length=255), nullable=True),
        sa.Column("role", _enum("userrole", "BUYER", "BUILDER", "ADMIN"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("buyer_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=300), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "property_type",
            _enum(
                "propertytypes",
                "APARTMENT",
                "VILLA",
                "HOUSE",
                "FARMHOUSE",
                "GUEST_HOUSE",
                "COMMERCIAL",
                "OFFICE",
                "INDUSTRIAL",
                "WAREHOUSE",
                "PLOT",
                "AGRICULTURAL_LAND",
            ),
            nullable=True,
        ),
        sa.Column("purpose", _enum("propertypurpose", "BUY", "RENT"), nullable=True),
        sa.Column("price", MONEY, nullable=True),
        sa.Column("rent_amount", MONEY, nullable=True),
        sa.Column("deposit_amount", MONEY, nullable=True),
        sa.Column("area_sqft", sa.Integer(), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("area", sa.String(length=255), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column(
            "availability_status",
            _enum("availabilitystatus", "AVAILABLE", "BOOKED", "SOLD", "RENTED"),
            nullable=False,
        ),
        sa.Column(
            "rental_status",
            _enum("rentalstatus", "AVAILABLE", "RENTED"),
            nullable=False,
        ),
        sa.Column("sold_date", sa.DateTime(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["buyer_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("idx_property_city", "properties", ["city"])
    op.create_index("idx_property_purpose", "properties", ["purpose"])
    op.create_index("idx_property_type", "properties", ["property_type"])
    op.create_index("idx_property_status", "properties", ["availability_status"])
    op.create_index(op.f("ix_properties_owner_id"), "properties", ["owner_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("gateway_order_id", sa.String(length=64), nullable=False),
        sa.Column("gateway_payment_id", sa.String(length=64), nullable=True),
        sa.Column("gateway_signature", sa.String(length=255), nullable=True),
        sa.Column("payer_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=True),
        sa.Column("kind", _enum("transactionkind", "PURCHASE", "RENT"), nullable=False),
        sa.Column(
            "status",
            _enum("paymentstatus", "PENDING", "SUCCESS", "FAILED", "REFUNDED"),
            nullable=False,
        ),
        sa.Column("payable_amount", MONEY, nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("remaining_amount", MONEY, nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False),
        sa.Column("payment_date", sa.DateTime(), nullable=True),
        sa.Column("billing_period", sa.String(length=32), nullable=True),
        sa.Column("next_due_date", sa.Date(), nullable=True),
        sa.Column("receipt_url", sa.Text(), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("payable_amount > 0", name="ck_payments_payable_positive"),
        sa.CheckConstraint("total_amount >= 0", name="ck_payments_total_non_negative"),
        sa.CheckConstraint(
            "remaining_amount >= 0", name="ck_payments_remaining_non_negative"
        ),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["payer_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_payments_gateway_order_id"),
        "payments",
        ["gateway_order_id"],
        unique=True,
    )
    op.create_index(op.f("ix_payments_owner_id"), "payments", ["owner_id"])
    op.create_index(op.f("ix_payments_status"), "payments", ["status"])
    op.create_index(
        "idx_payments_payer_property", "payments", ["payer_id", "property_id"]
    )
    # one completed purchase per property
    op.create_index(
        "uq_payments_purchase_success_per_property",
        "payments",
        ["property_id"],
        unique=True,
        postgresql_where=sa.text("kind = 'PURCHASE' AND status = 'SUCCESS'"),
        sqlite_where=sa.text("kind = 'PURCHASE' AND status = 'SUCCESS'"),
    )

    op.create_table(
        "rent_subscriptions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("renter_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=True),
        sa.Column("monthly_rent", MONEY, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("next_payment_due", sa.Date(), nullable=False),
        sa.Column("last_payment_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["renter_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "renter_id", "property_id", name="uq_rent_subscription_pair"
        ),
    )

    op.create_table(
        "rent_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("applicant_name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("monthly_rent", MONEY, nullable=True),
        sa.Column("deposit", MONEY, nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column(
            "status",
            _enum("rentrequeststatus", "PENDING", "APPROVED", "REJECTED"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_rent_requests_property_id"), "rent_requests", ["property_id"])
    op.create_index(op.f("ix_rent_requests_email"), "rent_requests", ["email"])

    op.create_table(
        "enquiries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column(
            "enquiry_type", _enum("enquirytype", "BUY", "RENT", "VISIT"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_enquiries_property_id"), "enquiries", ["property_id"])

    op.create_table(
        "complaints",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "status", _enum("complaintstatus", "PENDING", "RESOLVED"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_complaints_property_id"), "complaints", ["property_id"])


def downgrade():
    op.drop_index(op.f("ix_complaints_property_id"), table_name="complaints")
    op.drop_table("complaints")
    op.drop_index(op.f("ix_enquiries_property_id"), table_name="enquiries")
    op.drop_table("enquiries")
    op.drop_index(op.f("ix_rent_requests_email"), table_name="rent_requests")
    op.drop_index(op.f("ix_rent_requests_property_id"), table_name="rent_requests")
    op.drop_table("rent_requests")
    op.drop_table("rent_subscriptions")
    op.drop_index("uq_payments_purchase_success_per_property", table_name="payments")
    op.drop_index("idx_payments_payer_property", table_name="payments")
    op.drop_index(op.f("ix_payments_status"), table_name="payments")
    op.drop_index(op.f("ix_payments_owner_id"), table_name="payments")
    op.drop_index(op.f("ix_payments_gateway_order_id"), table_name="payments")
    op.drop_table("payments")
    op.drop_index(op.f("ix_properties_owner_id"), table_name="properties")
    op.drop_index("idx_property_status", table_name="properties")
    op.drop_index("idx_property_type", table_name="properties")
    op.drop_index("idx_property_purpose", table_name="properties")
    op.drop_index("idx_property_city", table_name="properties")
    op.drop_table("properties")
    op.drop_table("users")
