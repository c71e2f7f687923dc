"""
Checkout form validation tests

Required fields, email/phone/pincode formats and first-failure ordering.
"""
from __future__ import annotations

import pytest

from storefront.core.exceptions import CheckoutValidationError
from storefront.core.validation import CheckoutValidator
from storefront.domain.order import CheckoutForm


def _form(**overrides) -> CheckoutForm:
    data = {
        "name": "Asha Rao",
        "email": "user@example.com",
        "phone": "9876543210",
        "address": "12 MG Road",
        "city": "Mumbai",
        "pincode": "400001",
        "payment_method": "razorpay",
    }
    data.update(overrides)
    return CheckoutForm(**data)


class TestFieldFormats:
    @pytest.mark.parametrize("email,ok", [("bad-email", False), ("user@example.com", True), ("a b@c.d", False)])
    def test_email(self, email, ok):
        assert CheckoutValidator.validate_email(email) is ok

    @pytest.mark.parametrize(
        "phone,ok",
        [
            ("12345", False),
            ("9876543210", True),
            ("5876543210", False),
            ("98765432101", False),
            ("9\u0668\u0667\u0666\u0665\u0664\u0663\u0662\u0661\u0660", False),
        ],
    )
    def test_phone(self, phone, ok):
        assert CheckoutValidator.validate_phone(phone) is ok

    @pytest.mark.parametrize("pincode,ok", [("000000", False), ("400001", True), ("40001", False), ("4000a1", False)])
    def test_pincode(self, pincode, ok):
        assert CheckoutValidator.validate_pincode(pincode) is ok


class TestValidateForm:
    def test_valid_form_is_returned_normalized(self):
        form = CheckoutValidator.validate(_form(name="  Asha  ", payment_method="RazorPay"))
        assert form.name == "Asha"
        assert form.payment_method == "razorpay"

    @pytest.mark.parametrize("field_name", ["name", "email", "phone", "address", "city", "pincode"])
    def test_missing_required_field(self, field_name):
        with pytest.raises(CheckoutValidationError) as exc:
            CheckoutValidator.validate(_form(**{field_name: "   "}))
        assert exc.value.field == field_name
        assert exc.value.message == f"Please fill in {field_name}"

    def test_first_failure_wins(self):
        with pytest.raises(CheckoutValidationError) as exc:
            CheckoutValidator.validate(_form(email="bad-email", phone="12345", pincode="000000"))
        assert exc.value.field == "email"

    def test_bad_phone_message(self):
        with pytest.raises(CheckoutValidationError) as exc:
            CheckoutValidator.validate(_form(phone="12345"))
        assert exc.value.message == "Please enter a valid 10-digit phone number"

    def test_bad_pincode_message(self):
        with pytest.raises(CheckoutValidationError) as exc:
            CheckoutValidator.validate(_form(pincode="000000"))
        assert exc.value.message == "Please enter a valid 6-digit pincode"

    def test_unavailable_payment_method(self):
        with pytest.raises(CheckoutValidationError) as exc:
            CheckoutValidator.validate(_form(payment_method="paypal"), frozenset({"razorpay"}))
        assert exc.value.field == "paymentMethod"
