# form rules shared by the login, checkout and admin forms
from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from textual.validation import Function, Integer, Length, Regex, Validator

from api.models import ROLE_ADMIN, ROLE_CUSTOMER

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
DIGITS_PATTERN = r"^[0-9]+$"

Rules = Mapping[str, Sequence[Validator]]


def min_length(n: int, label: str) -> Length:
    return Length(minimum=n, failure_description=f"{label} must be at least {n} characters")


def email() -> Regex:
    return Regex(EMAIL_PATTERN, failure_description="Invalid email address")


def digits(n: int, label: str) -> List[Validator]:
    return [
        Length(minimum=n, failure_description=f"{label} must be at least {n} digits"),
        Regex(DIGITS_PATTERN, failure_description="Only digits are allowed"),
    ]


def _positive(value: str) -> bool:
    try:
        return float(value) > 0
    except ValueError:
        return False


def optional(validator: Validator) -> Function:
    """Accept an empty value, otherwise defer to validator."""
    return Function(
        lambda value: not value or validator.validate(value).is_valid,
        failure_description=validator.failure_description,
    )


CHECKOUT_RULES: Rules = {
    "first_name": [min_length(2, "First name")],
    "last_name": [min_length(2, "Last name")],
    "email": [email()],
    "phone": digits(10, "Phone number"),
    "address": [min_length(10, "Address")],
    "city": [min_length(2, "City")],
    "province": [min_length(2, "Province")],
    "postal_code": digits(5, "Postal code"),
}

PRODUCT_RULES: Rules = {
    "name": [min_length(2, "Product name")],
    "category_id": [Length(minimum=1, failure_description="Please select a category")],
    "description": [min_length(10, "Description")],
    "price": [Function(_positive, failure_description="Price must be positive")],
    "stock": [Integer(minimum=0, failure_description="Stock must be a non-negative integer")],
}

CATEGORY_RULES: Rules = {
    "name": [min_length(2, "Category name")],
}

USER_RULES: Rules = {
    "name": [min_length(2, "Name")],
    "email": [email()],
    "password": [optional(min_length(6, "Password"))],
    "role": [
        Function(
            lambda value: value in (ROLE_ADMIN, ROLE_CUSTOMER),
            failure_description="Unknown role",
        )
    ],
}

LOGIN_RULES: Rules = {
    "email": [email()],
    "password": [Length(minimum=1, failure_description="Password is required")],
}

REGISTER_RULES: Rules = {
    "name": [min_length(2, "Name")],
    "email": [email()],
    "password": [min_length(6, "Password")],
    "confirm": [min_length(6, "Password confirmation")],
}


def validate_form(values: Mapping[str, str], rules: Rules) -> Dict[str, List[str]]:
    """
    Run every rule against values (missing fields count as "").
    Returns {field: [failure descriptions]} for invalid fields only.
    """
    errors: Dict[str, List[str]] = {}
    for name, validators in rules.items():
        value = values.get(name) or ""
        failures: List[str] = []
        for validator in validators:
            result = validator.validate(value)
            if not result.is_valid:
                failures.extend(d for d in result.failure_descriptions if d)
        if failures:
            errors[name] = failures
    return errors


def validate_registration(values: Mapping[str, str]) -> Dict[str, List[str]]:
    errors = validate_form(values, REGISTER_RULES)
    if values.get("password") != values.get("confirm"):
        errors.setdefault("confirm", []).append("Passwords do not match")
    return errors
