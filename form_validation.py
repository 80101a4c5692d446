"""
Validation of transaction and user form input.

Validators never stop at the first problem: every violation is collected so
the form can show the whole list at once.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[+]?[0-9\s\-()]{7,20}$")
SPECIAL_CHARS_RE = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

MIN_DATE = date(1900, 1, 1)
MAX_AMOUNT = 999999999


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _result(errors):
    return ValidationResult(is_valid=not errors, errors=errors)


def _one_year_from(today):
    try:
        return today.replace(year=today.year + 1)
    except ValueError:
        # Feb 29
        return today.replace(year=today.year + 1, day=28)


def parse_amount(value):
    """Float value of a form amount, or None if it is not a usable number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        try:
            amount = float(str(value).strip())
        except ValueError:
            return None
    if math.isnan(amount):
        return None
    return amount


def parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def validate_transaction_form(data, today=None):
    errors = []
    today = today or date.today()

    concept = data.get("concept")
    if not concept or not isinstance(concept, str):
        errors.append("Concept is required")
    elif len(concept.strip()) == 0:
        errors.append("Concept cannot be empty")
    elif len(concept.strip()) < 3:
        errors.append("Concept must be at least 3 characters")
    elif len(concept.strip()) > 100:
        errors.append("Concept cannot be longer than 100 characters")

    amount = data.get("amount")
    if amount is None or amount == "":
        errors.append("Amount is required")
    else:
        parsed = parse_amount(amount)
        if parsed is None:
            errors.append("Amount must be a valid number")
        elif parsed <= 0:
            errors.append("Amount must be greater than 0")
        elif parsed > MAX_AMOUNT:
            errors.append("Amount cannot be greater than 999,999,999")

    raw_date = data.get("date")
    if not raw_date or not isinstance(raw_date, (str, date)):
        errors.append("Date is required")
    else:
        parsed_date = parse_date(raw_date)
        if parsed_date is None:
            errors.append("Date must be valid")
        else:
            if parsed_date > _one_year_from(today):
                errors.append("Date cannot be more than 1 year in the future")
            if parsed_date < MIN_DATE:
                errors.append("Date cannot be before 1900")

    tx_type = data.get("type")
    if not tx_type:
        errors.append("Transaction type is required")
    elif tx_type not in ("INCOME", "EXPENSE"):
        errors.append("Type must be INCOME or EXPENSE")

    return _result(errors)


def validate_user_form(data):
    errors = []

    name = data.get("name")
    if not name or not isinstance(name, str):
        errors.append("Name is required")
    elif len(name.strip()) == 0:
        errors.append("Name cannot be empty")
    elif len(name.strip()) < 2:
        errors.append("Name must be at least 2 characters")
    elif len(name.strip()) > 50:
        errors.append("Name cannot be longer than 50 characters")

    email = data.get("email")
    if not email or not isinstance(email, str):
        errors.append("Email is required")
    elif not EMAIL_RE.fullmatch(email):
        errors.append("Email must have a valid format")
    elif len(email) > 100:
        errors.append("Email cannot be longer than 100 characters")

    phone = data.get("phone")
    if phone and isinstance(phone, str) and phone.strip():
        if not PHONE_RE.fullmatch(phone.strip()):
            errors.append("Phone must have a valid format")

    role = data.get("role")
    if not role:
        errors.append("Role is required")
    elif role not in ("USER", "ADMIN"):
        errors.append("Role must be USER or ADMIN")

    return _result(errors)


def is_valid_email(email):
    if not isinstance(email, str) or not email:
        return False
    if ".." in email:
        return False
    return bool(EMAIL_RE.fullmatch(email)) and len(email) <= 100


def validate_password(password):
    """Password strength rules. Not used by the GitHub login flow."""
    errors = []

    if not password or not isinstance(password, str):
        errors.append("Password is required")
        return _result(errors)

    if len(password) < 8:
        errors.append("Password must be at least 8 characters")
    if len(password) > 128:
        errors.append("Password cannot be longer than 128 characters")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    if not SPECIAL_CHARS_RE.search(password):
        errors.append("Password must contain at least one special character")

    return _result(errors)
