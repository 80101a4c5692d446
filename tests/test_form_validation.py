from datetime import date

import pytest

from form_validation import (
    is_valid_email,
    validate_password,
    validate_transaction_form,
    validate_user_form,
)

TODAY = date(2024, 6, 1)

VALID_TRANSACTION = {
    "concept": "Monthly salary",
    "amount": "1000",
    "date": "2024-01-01",
    "type": "INCOME",
}

VALID_USER = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "phone": "+1 (555) 123-4567",
    "role": "USER",
}


def transaction(**overrides):
    return validate_transaction_form({**VALID_TRANSACTION, **overrides}, today=TODAY)


def user(**overrides):
    return validate_user_form({**VALID_USER, **overrides})


class TestTransactionForm:

    def test_valid(self):
        result = transaction()
        assert result.is_valid
        assert result.errors == []

    def test_numeric_amount_and_expense(self):
        assert transaction(amount=1500.5, type="EXPENSE").is_valid

    @pytest.mark.parametrize("concept, message", [
        ("", "Concept is required"),
        (None, "Concept is required"),
        (123, "Concept is required"),
        ("   ", "Concept cannot be empty"),
        ("AB", "Concept must be at least 3 characters"),
        ("A" * 101, "Concept cannot be longer than 100 characters"),
    ])
    def test_concept(self, concept, message):
        result = transaction(concept=concept)
        assert not result.is_valid
        assert message in result.errors

    @pytest.mark.parametrize("amount, message", [
        ("", "Amount is required"),
        (None, "Amount is required"),
        ("abc", "Amount must be a valid number"),
        ("0", "Amount must be greater than 0"),
        (-100, "Amount must be greater than 0"),
        ("1000000000", "Amount cannot be greater than 999,999,999"),
    ])
    def test_amount(self, amount, message):
        assert message in transaction(amount=amount).errors

    def test_amount_upper_bound_is_inclusive(self):
        assert transaction(amount="999999999").is_valid

    @pytest.mark.parametrize("value, message", [
        ("", "Date is required"),
        ("not-a-date", "Date must be valid"),
        ("1899-12-31", "Date cannot be before 1900"),
        ("2025-06-02", "Date cannot be more than 1 year in the future"),
    ])
    def test_date(self, value, message):
        assert message in transaction(date=value).errors

    def test_iso_timestamp_with_z_suffix(self):
        assert transaction(date="2024-01-16T00:00:00Z").is_valid
        assert transaction(date="2024-01-16T00:00:00.000Z").is_valid

    def test_date_bounds_are_inclusive(self):
        assert transaction(date="1900-01-01").is_valid
        assert transaction(date="2025-06-01").is_valid

    @pytest.mark.parametrize("tx_type, message", [
        ("", "Transaction type is required"),
        ("TRANSFER", "Type must be INCOME or EXPENSE"),
        ("income", "Type must be INCOME or EXPENSE"),
    ])
    def test_type(self, tx_type, message):
        assert message in transaction(type=tx_type).errors

    def test_collects_every_error(self):
        result = validate_transaction_form({"concept": "AB", "amount": "0", "date": "", "type": "X"}, today=TODAY)
        assert result.errors == [
            "Concept must be at least 3 characters",
            "Amount must be greater than 0",
            "Date is required",
            "Type must be INCOME or EXPENSE",
        ]


class TestUserForm:

    def test_valid(self):
        assert user().is_valid

    def test_phone_is_optional(self):
        assert user(phone="").is_valid
        assert validate_user_form({k: v for k, v in VALID_USER.items() if k != "phone"}).is_valid

    @pytest.mark.parametrize("name, message", [
        ("", "Name is required"),
        ("  ", "Name cannot be empty"),
        ("A", "Name must be at least 2 characters"),
        ("A" * 51, "Name cannot be longer than 50 characters"),
    ])
    def test_name(self, name, message):
        assert message in user(name=name).errors

    def test_email(self):
        assert "Email is required" in user(email="").errors
        assert "Email must have a valid format" in user(email="not-an-email").errors
        assert "Email cannot be longer than 100 characters" in user(email="a" * 95 + "@example.com").errors

    @pytest.mark.parametrize("phone", ["1234567", "+34 600 123 456", "(555) 123-4567"])
    def test_valid_phones(self, phone):
        assert user(phone=phone).is_valid

    @pytest.mark.parametrize("phone", ["123", "phone-number", "1" * 21])
    def test_invalid_phones(self, phone):
        assert "Phone must have a valid format" in user(phone=phone).errors

    def test_role(self):
        assert "Role is required" in user(role="").errors
        assert "Role must be USER or ADMIN" in user(role="ROOT").errors
        assert user(role="ADMIN").is_valid


class TestEmail:

    @pytest.mark.parametrize("email", ["test@example.com", "user.name@domain.co", "a+b@x.io"])
    def test_valid(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["", "plain", "@domain.com", "user@", "user@domain", "a..b@x.com", "a b@x.com", None, 42])
    def test_invalid(self, email):
        assert not is_valid_email(email)


class TestPassword:

    def test_strong(self):
        assert validate_password("Str0ng!Pass").is_valid

    def test_missing(self):
        assert validate_password("").errors == ["Password is required"]

    def test_weak_password_lists_every_rule(self):
        result = validate_password("abc")
        assert not result.is_valid
        assert "Password must be at least 8 characters" in result.errors
        assert "Password must contain at least one uppercase letter" in result.errors
        assert "Password must contain at least one number" in result.errors
        assert "Password must contain at least one special character" in result.errors
        assert "Password must contain at least one lowercase letter" not in result.errors

    def test_too_long(self):
        assert "Password cannot be longer than 128 characters" in validate_password("Aa1!" * 40).errors
