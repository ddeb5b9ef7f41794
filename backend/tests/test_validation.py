"""
Payload validation tests.

Verifies:
- Numeric columns coerce JSON numbers / numeric strings to Decimal
- String columns are stripped, blank and over-long values rejected
- only policy-writable fields pass, required fields enforced on create
"""

from decimal import Decimal

import pytest

from printshop.models import Expense, Product
from printshop.services.expense_service import EXPENSE_POLICY
from printshop.services.products_service import PRODUCT_POLICY
from printshop.validation import ValidationError, validate_payload


def _product(payload, partial=False):
    return validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)


class TestValidatePayload:
    def test_amounts_become_decimal_and_text_is_stripped(self):
        patch = _product({"name": "  Banner  ", "unit_price": "50000.50", "calculation_method": "by_area"})
        assert patch == {"name": "Banner", "unit_price": Decimal("50000.50"), "calculation_method": "by_area"}

        expense = validate_payload(
            model=Expense, payload={"description": "Tinta", "cost": 25000}, policy=EXPENSE_POLICY, partial=False,
        )
        assert expense["cost"] == Decimal("25000")

    @pytest.mark.parametrize("price", ["abc", "NaN", "Infinity", True, [1]])
    def test_non_numeric_amount_rejected(self, price):
        with pytest.raises(ValidationError):
            _product({"name": "Banner", "unit_price": price, "calculation_method": "by_area"})

    def test_blank_and_too_long_names_rejected(self):
        with pytest.raises(ValidationError, match="cannot be blank"):
            _product({"name": "   "}, partial=True)
        with pytest.raises(ValidationError, match="exceeds max length"):
            _product({"name": "x" * 1000}, partial=True)

    def test_unknown_and_reserved_fields_rejected(self):
        with pytest.raises(ValidationError, match="Field not allowed"):
            _product({"version": 3}, partial=True)
        with pytest.raises(ValidationError, match="Field not allowed"):
            _product({"created_at": "2026-10-18T09:30:15"}, partial=True)

    def test_required_fields_on_create_only(self):
        with pytest.raises(ValidationError, match="Missing required fields"):
            _product({"name": "Banner"})
        assert _product({"unit_price": "1"}, partial=True) == {"unit_price": Decimal("1")}
