"""Checkout form validation."""
from __future__ import annotations

import re

from storefront.core.exceptions import CheckoutValidationError
from storefront.domain.order import CheckoutForm


class CheckoutValidator:
    """Structural checks on the checkout form, first failure wins."""

    EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    PHONE_PATTERN = re.compile(r"^[6-9][0-9]{9}$")  # 10-digit Indian mobile
    PINCODE_PATTERN = re.compile(r"^[1-9][0-9]{5}$")

    @staticmethod
    def validate_email(email: str) -> bool:
        if not email:
            return False
        return bool(CheckoutValidator.EMAIL_PATTERN.fullmatch(email))

    @staticmethod
    def validate_phone(phone: str) -> bool:
        if not phone:
            return False
        return bool(CheckoutValidator.PHONE_PATTERN.fullmatch(phone))

    @staticmethod
    def validate_pincode(pincode: str) -> bool:
        if not pincode:
            return False
        return bool(CheckoutValidator.PINCODE_PATTERN.fullmatch(pincode))

    @classmethod
    def validate(cls, form: CheckoutForm, allowed_methods: frozenset[str] | None = None) -> CheckoutForm:
        """Return the normalized form or raise ``CheckoutValidationError``."""
        form = form.normalized()

        for field_name in CheckoutForm.REQUIRED_FIELDS:
            if not getattr(form, field_name):
                raise CheckoutValidationError(field_name, f"Please fill in {field_name}")

        if not cls.validate_email(form.email):
            raise CheckoutValidationError("email", "Please enter a valid email address")
        if not cls.validate_phone(form.phone):
            raise CheckoutValidationError("phone", "Please enter a valid 10-digit phone number")
        if not cls.validate_pincode(form.pincode):
            raise CheckoutValidationError("pincode", "Please enter a valid 6-digit pincode")

        if allowed_methods is not None and form.payment_method not in allowed_methods:
            raise CheckoutValidationError("paymentMethod", "Please choose an available payment method")

        return form
