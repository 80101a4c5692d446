import itertools
from datetime import date

import pytest

from financial_calculations import (
    calculate_balance,
    calculate_financial_stats,
    calculate_total_expenses,
    calculate_total_income,
    filter_transactions_by_period,
    group_by_concept,
    group_by_day,
    period_start,
)

TRANSACTIONS = [
    {"id": "1", "amount": 1000, "type": "INCOME", "date": "2024-01-15", "concept": "Salary"},
    {"id": "2", "amount": 500, "type": "EXPENSE", "date": "2024-01-16", "concept": "Groceries"},
    {"id": "3", "amount": 2000, "type": "INCOME", "date": "2024-01-17", "concept": "Bonus"},
    {"id": "4", "amount": 300, "type": "EXPENSE", "date": "2024-01-18", "concept": "Groceries"},
]


class TestBalance:

    def test_mixed_transactions(self):
        assert calculate_balance(TRANSACTIONS) == 2200

    def test_empty_list(self):
        assert calculate_balance([]) == 0

    def test_only_expenses(self):
        assert calculate_balance([TRANSACTIONS[1], TRANSACTIONS[3]]) == -800

    def test_decimals(self):
        records = [
            {"amount": 1000.5, "type": "INCOME"},
            {"amount": 250.25, "type": "EXPENSE"},
        ]
        assert calculate_balance(records) == pytest.approx(750.25)

    def test_order_does_not_matter(self):
        results = {calculate_balance(list(p)) for p in itertools.permutations(TRANSACTIONS)}
        assert results == {2200}

    @pytest.mark.parametrize("bad", [None, "invalid", {"amount": 1}])
    def test_rejects_non_list(self, bad):
        with pytest.raises(TypeError, match="must be a list"):
            calculate_balance(bad)

    @pytest.mark.parametrize("record", [
        {"amount": "100", "type": "INCOME"},
        {"amount": True, "type": "INCOME"},
        {"type": "INCOME"},
        {"amount": 100},
        None,
    ])
    def test_rejects_unreadable_record(self, record):
        with pytest.raises(ValueError, match="Invalid transaction"):
            calculate_balance([record])

    def test_rejects_unknown_type(self):
        with pytest.raises(ValueError, match="Invalid transaction type: TRANSFER"):
            calculate_balance([{"amount": 100, "type": "TRANSFER"}])


class TestTotals:

    def test_totals(self):
        assert calculate_total_income(TRANSACTIONS) == 3000
        assert calculate_total_expenses(TRANSACTIONS) == 800

    def test_empty(self):
        assert calculate_total_income([]) == 0
        assert calculate_total_expenses([]) == 0

    def test_non_list(self):
        with pytest.raises(TypeError):
            calculate_total_income(None)

    def test_stats(self):
        stats = calculate_financial_stats(TRANSACTIONS)
        assert stats == {
            "total_income": 3000,
            "total_expenses": 800,
            "balance": 2200,
            "transaction_count": 4,
            "average_income": 750,
            "average_expense": 200,
        }

    def test_stats_for_empty_list_avoid_division_by_zero(self):
        stats = calculate_financial_stats([])
        assert stats["transaction_count"] == 0
        assert stats["average_income"] == 0
        assert stats["average_expense"] == 0


class TestPeriodFilter:

    def test_inclusive_bounds(self):
        filtered = filter_transactions_by_period(TRANSACTIONS, "2024-01-16", "2024-01-17")
        assert [t["id"] for t in filtered] == ["2", "3"]

    def test_single_day(self):
        filtered = filter_transactions_by_period(TRANSACTIONS, "2024-01-18", "2024-01-18")
        assert [t["id"] for t in filtered] == ["4"]

    def test_accepts_date_objects(self):
        filtered = filter_transactions_by_period(TRANSACTIONS, date(2024, 1, 1), date(2024, 1, 15))
        assert [t["id"] for t in filtered] == ["1"]

    def test_utc_timestamps_with_z_suffix(self):
        records = [{**TRANSACTIONS[1], "date": "2024-01-16T09:30:00Z"}]
        filtered = filter_transactions_by_period(records, "2024-01-16T00:00:00Z", "2024-01-16T23:59:59.999Z")
        assert filtered == records

    def test_no_match(self):
        assert filter_transactions_by_period(TRANSACTIONS, "2024-02-01", "2024-02-28") == []

    def test_invalid_dates(self):
        with pytest.raises(ValueError, match="Dates must be valid"):
            filter_transactions_by_period(TRANSACTIONS, "invalid", "2024-01-01")

    def test_start_after_end(self):
        with pytest.raises(ValueError, match="Start date must be before end date"):
            filter_transactions_by_period(TRANSACTIONS, "2024-01-31", "2024-01-01")


class TestReportHelpers:

    def test_period_start(self):
        today = date(2024, 5, 20)
        assert period_start("week", today) == date(2024, 5, 13)
        assert period_start("month", today) == date(2024, 5, 1)
        assert period_start("year", today) == date(2024, 1, 1)
        assert period_start("decade", today) == date(2024, 5, 1)

    def test_group_by_day(self):
        rows = group_by_day(list(reversed(TRANSACTIONS)))
        assert rows[0] == {"date": "2024-01-15", "income": 1000, "expense": 0}
        assert [r["date"] for r in rows] == ["2024-01-15", "2024-01-16", "2024-01-17", "2024-01-18"]

    def test_group_by_concept(self):
        rows = group_by_concept(TRANSACTIONS)
        assert rows[0] == {"concept": "Groceries", "income": 0, "expense": 800, "count": 2}
        assert len(rows) == 3
