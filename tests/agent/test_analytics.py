"""Tests for the in-memory filter, statistic and aggregation helpers."""
from __future__ import annotations

import json

import pytest

from expense_agent.agent.tools import (
    aggregate_expenses,
    calculate_statistic,
    filter_expenses,
)
from expense_agent.schemas import (
    AggregateRequest,
    Expense,
    ExpenseFilter,
    ExpenseStore,
    StatisticRequest,
)


@pytest.fixture()
def store() -> ExpenseStore:
    return ExpenseStore.from_records(
        [
            {"date": "2025-08-30", "category": "Groceries", "vendor": "Whole Foods", "amount": 80},
            {"date": "2025-09-05", "category": "Groceries", "vendor": "Trader Joe's", "amount": 50},
            {"date": "2025-09-12", "category": "Dining", "vendor": "Chipotle", "amount": 12.5},
            {"date": "2025-09-20", "category": "groceries", "vendor": "Whole Foods Market", "amount": 30},
            {"date": "2025-09-30", "vendor": "Corner Market", "amount": 7.25},
            {"date": "2025-10-01", "category": "Dining", "vendor": "Sweetgreen", "amount": 18},
        ]
    )


def test_filter_without_predicates_returns_copy_in_store_order(store):
    result = filter_expenses(store, ExpenseFilter())

    assert result == list(store)
    assert result is not store


def test_filter_date_range_is_inclusive(store):
    result = filter_expenses(
        store, ExpenseFilter(start_date="2025-09-05", end_date="2025-09-30")
    )

    assert [e.date for e in result] == [
        "2025-09-05",
        "2025-09-12",
        "2025-09-20",
        "2025-09-30",
    ]


def test_filter_category_is_case_insensitive_exact_match(store):
    result = filter_expenses(store, ExpenseFilter(category="GROCERIES"))

    assert [e.amount for e in result] == [80, 50, 30]
    assert filter_expenses(store, ExpenseFilter(category="Grocer")) == []


def test_filter_vendor_is_case_insensitive_substring(store):
    result = filter_expenses(store, ExpenseFilter(vendor="whole"))

    assert [e.vendor for e in result] == ["Whole Foods", "Whole Foods Market"]


def test_filter_amount_bounds_are_inclusive(store):
    result = filter_expenses(store, ExpenseFilter(min_amount=12.5, max_amount=50))

    assert [e.amount for e in result] == [50, 12.5, 30, 18]


def test_filter_every_result_satisfies_all_predicates(store):
    spec = ExpenseFilter(start_date="2025-09-01", category="groceries", max_amount=60)

    first = filter_expenses(store, spec)
    second = filter_expenses(store, spec)

    assert first == second
    assert all(e in store for e in first)
    assert all(
        e.date >= "2025-09-01" and e.category.lower() == "groceries" and e.amount <= 60
        for e in first
    )


def test_filter_accepts_external_field_names():
    spec = ExpenseFilter.model_validate(
        {"startDate": "2025-09-01", "minAmount": "10", "excludeAnomalies": True}
    )

    assert spec.start_date == "2025-09-01"
    assert spec.min_amount == 10.0
    assert spec.describe() == {
        "startDate": "2025-09-01",
        "minAmount": 10.0,
        "excludeAnomalies": True,
    }


def test_exclude_anomalies_is_noop_for_single_match(store):
    spec = ExpenseFilter(vendor="chipotle", exclude_anomalies=True)

    assert filter_expenses(store, spec) == filter_expenses(
        store, ExpenseFilter(vendor="chipotle")
    )


def test_exclude_anomalies_runs_after_other_predicates():
    amounts = [10, 12, 11, 13, 9, 10, 12, 11, 10, 500]
    store = ExpenseStore(
        Expense(date=f"2025-09-{i + 1:02d}", vendor="Shop", amount=amount)
        for i, amount in enumerate(amounts)
    )

    kept = filter_expenses(store, ExpenseFilter(exclude_anomalies=True))
    assert [e.amount for e in kept] == amounts[:-1]

    # With the big purchase filtered out first, nothing is left to flag.
    bounded = filter_expenses(store, ExpenseFilter(max_amount=100, exclude_anomalies=True))
    assert [e.amount for e in bounded] == amounts[:-1]


def test_statistic_count_matches_filter_length(store):
    result = calculate_statistic(store, StatisticRequest(metric="count", category="dining"))

    assert result == {
        "metric": "count",
        "value": 2,
        "count": 2,
        "filter": {"category": "dining"},
    }


def test_statistic_count_is_zero_for_empty_match(store):
    result = calculate_statistic(store, StatisticRequest(metric="count", vendor="nobody"))

    assert result["value"] == 0
    assert result["count"] == 0


def test_statistic_mean_on_empty_match_returns_zero(store):
    result = calculate_statistic(store, StatisticRequest(metric="mean", vendor="nobody"))

    assert result == {
        "metric": "mean",
        "value": 0,
        "count": 0,
        "filter": {"vendor": "nobody"},
    }


@pytest.mark.parametrize(
    "metric, expected",
    [
        ("sum", 197.75),
        ("mean", 32.96),
        ("median", 24.0),
        ("min", 7.25),
        ("max", 80),
    ],
)
def test_statistic_metrics(store, metric, expected):
    result = calculate_statistic(store, StatisticRequest(metric=metric))

    assert result["value"] == pytest.approx(expected)
    assert result["count"] == 6
    assert result["filter"] == {}


def test_statistic_median_of_odd_count(store):
    result = calculate_statistic(
        store, StatisticRequest(metric="median", start_date="2025-09-01", end_date="2025-09-30")
    )

    # 50, 12.5, 30, 7.25 -> sorted 7.25, 12.5, 30, 50
    assert result["value"] == 21.25
    odd = calculate_statistic(store, StatisticRequest(metric="median", category="groceries"))
    assert odd["value"] == 50


def test_aggregate_by_month_sums_groups():
    store = ExpenseStore.from_records(
        [
            {"date": "2025-09-05", "vendor": "A", "amount": 50},
            {"date": "2025-09-20", "vendor": "B", "amount": 30},
        ]
    )

    result = aggregate_expenses(store, AggregateRequest(group_by="month", metric="sum"))

    assert result["groupBy"] == "month"
    assert result["count"] == 2
    assert result["entries"] == [{"key": "2025-09", "value": 80, "count": 2}]


def test_aggregate_by_category_defaults_missing_labels(store):
    result = aggregate_expenses(store, AggregateRequest(group_by="category", metric="count"))

    keys = {entry["key"]: entry["value"] for entry in result["entries"]}
    assert keys == {"Groceries": 2, "Dining": 2, "groceries": 1, "Uncategorized": 1}


def test_aggregate_counts_stay_whole_numbers(store):
    result = aggregate_expenses(store, AggregateRequest(group_by="month", metric="count"))

    assert all(type(entry["value"]) is int for entry in result["entries"])
    assert json.dumps(result["entries"][0]["value"]) == str(result["entries"][0]["value"])


def test_aggregate_entries_sorted_descending_and_counts_add_up(store):
    result = aggregate_expenses(
        store, AggregateRequest(group_by="vendor", metric="mean", exclude_anomalies=False)
    )

    values = [entry["value"] for entry in result["entries"]]
    assert values == sorted(values, reverse=True)
    assert sum(entry["count"] for entry in result["entries"]) == result["count"] == 6
    assert result["filter"] == {"excludeAnomalies": False}


def test_aggregate_ties_keep_discovery_order():
    store = ExpenseStore.from_records(
        [
            {"date": "2025-09-01", "vendor": "Second", "amount": 10.001},
            {"date": "2025-09-02", "vendor": "First", "amount": 10.004},
            {"date": "2025-09-03", "vendor": "Big", "amount": 99},
        ]
    )

    result = aggregate_expenses(store, AggregateRequest(group_by="vendor", metric="sum"))

    # both small vendors round to 10.0, so the rounded tie keeps store order
    assert [entry["key"] for entry in result["entries"]] == ["Big", "Second", "First"]


def test_aggregate_median_per_group(store):
    result = aggregate_expenses(
        store, AggregateRequest(group_by="category", metric="median", category="dining")
    )

    assert result["entries"] == [{"key": "Dining", "value": 15.25, "count": 2}]
    assert result["filter"] == {"category": "dining"}
