"""
Pure reducers over lists of transaction records.

A record is either a mapping (as produced by Transaction.to_dict) or an object
with `amount`, `type`, `date` and `concept` attributes.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from numbers import Number

INCOME = "INCOME"
EXPENSE = "EXPENSE"


def _field(record, name):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _ensure_list(transactions):
    if not isinstance(transactions, list):
        raise TypeError("Transactions must be a list")


def _is_number(value):
    return isinstance(value, (Number, Decimal)) and not isinstance(value, bool)


def _to_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        # fromisoformat only learned the Z suffix in 3.11
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def calculate_balance(transactions):
    """Income minus expenses. Refuses records it cannot read instead of treating them as zero."""
    _ensure_list(transactions)

    balance = 0
    for transaction in transactions:
        amount = _field(transaction, "amount")
        tx_type = _field(transaction, "type")
        if transaction is None or not _is_number(amount) or not tx_type:
            raise ValueError("Invalid transaction: must have a numeric amount and a type")
        if tx_type not in (INCOME, EXPENSE):
            raise ValueError(f"Invalid transaction type: {tx_type}. Must be 'INCOME' or 'EXPENSE'")

        if tx_type == INCOME:
            balance += amount
        else:
            balance -= amount
    return balance


def _total_for(transactions, tx_type):
    _ensure_list(transactions)
    return sum((_field(t, "amount") for t in transactions if _field(t, "type") == tx_type), 0)


def calculate_total_income(transactions):
    return _total_for(transactions, INCOME)


def calculate_total_expenses(transactions):
    return _total_for(transactions, EXPENSE)


def calculate_financial_stats(transactions):
    total_income = calculate_total_income(transactions)
    total_expenses = calculate_total_expenses(transactions)
    count = len(transactions)

    return {
        "total_income": total_income,
        "total_expenses": total_expenses,
        "balance": total_income - total_expenses,
        "transaction_count": count,
        "average_income": total_income / count if count > 0 else 0,
        "average_expense": total_expenses / count if count > 0 else 0,
    }


def filter_transactions_by_period(transactions, start_date, end_date):
    """Records dated within [start_date, end_date], compared by calendar day."""
    _ensure_list(transactions)

    start = _to_date(start_date)
    end = _to_date(end_date)
    if start is None or end is None:
        raise ValueError("Dates must be valid")
    if start > end:
        raise ValueError("Start date must be before end date")

    filtered = []
    for transaction in transactions:
        tx_date = _to_date(_field(transaction, "date"))
        if tx_date is not None and start <= tx_date <= end:
            filtered.append(transaction)
    return filtered


def period_start(period, today=None):
    today = today or date.today()
    if period == "week":
        return today - timedelta(days=7)
    if period == "year":
        return date(today.year, 1, 1)
    return date(today.year, today.month, 1)


def group_by_day(transactions):
    """Chart rows: one {date, income, expense} per day, oldest first."""
    days = {}
    for transaction in transactions:
        day = _to_date(_field(transaction, "date")).isoformat()
        row = days.setdefault(day, {"date": day, "income": 0, "expense": 0})
        if _field(transaction, "type") == INCOME:
            row["income"] += _field(transaction, "amount")
        else:
            row["expense"] += _field(transaction, "amount")
    return sorted(days.values(), key=lambda row: row["date"])


def group_by_concept(transactions):
    concepts = {}
    for transaction in transactions:
        concept = _field(transaction, "concept")
        row = concepts.setdefault(concept, {"concept": concept, "income": 0, "expense": 0, "count": 0})
        if _field(transaction, "type") == INCOME:
            row["income"] += _field(transaction, "amount")
        else:
            row["expense"] += _field(transaction, "amount")
        row["count"] += 1
    return sorted(concepts.values(), key=lambda row: row["count"], reverse=True)
