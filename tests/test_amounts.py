"""
Booking amount split and transaction kind selection.
"""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from models.enums import PropertyPurpose, TransactionKind
from services.payment_service import split_amount, transaction_kind

CAP = Decimal("25000")
MINIMUM = Decimal("1.00")


class TestSplitAmount:
    @pytest.mark.parametrize(
        "total, payable, remaining",
        [
            (Decimal("30000"), Decimal("25000"), Decimal("5000")),
            (Decimal("25000"), Decimal("25000"), Decimal("0")),
            (Decimal("12000"), Decimal("12000"), Decimal("0")),
            (Decimal("4500000.50"), Decimal("25000"), Decimal("4475000.50")),
        ],
    )
    def test_payable_is_capped_and_remaining_is_the_difference(
        self, total, payable, remaining
    ) -> None:
        got_payable, got_total, got_remaining = split_amount(total, CAP, MINIMUM)

        assert got_payable == payable
        assert got_total == total
        assert got_remaining == remaining
        assert got_total - got_payable == got_remaining

    @pytest.mark.parametrize("total", [None, Decimal("0")])
    def test_missing_or_zero_total_charges_the_minimum_unit(self, total) -> None:
        payable, got_total, remaining = split_amount(total, CAP, MINIMUM)

        assert payable == MINIMUM
        assert got_total == Decimal("0")
        assert remaining == Decimal("0")


class TestTransactionKind:
    def test_rent_purpose_is_rent(self) -> None:
        prop = SimpleNamespace(purpose=PropertyPurpose.RENT, rent_amount=None)
        assert transaction_kind(prop) == TransactionKind.RENT

    def test_buy_purpose_is_purchase_even_with_rent_amount(self) -> None:
        prop = SimpleNamespace(purpose=PropertyPurpose.BUY, rent_amount=Decimal("900"))
        assert transaction_kind(prop) == TransactionKind.PURCHASE

    def test_unset_purpose_falls_back_to_rent_amount(self) -> None:
        rentable = SimpleNamespace(purpose=None, rent_amount=Decimal("12000"))
        for_sale = SimpleNamespace(purpose=None, rent_amount=None)

        assert transaction_kind(rentable) == TransactionKind.RENT
        assert transaction_kind(for_sale) == TransactionKind.PURCHASE
