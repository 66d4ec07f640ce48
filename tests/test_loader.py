"""Tests for loading expense files into a store."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from expense_agent.data import ExpenseLoadError, load_expenses

SAMPLE_DATA = Path(__file__).resolve().parents[1] / "data" / "expenses.json"


def test_load_json_list(tmp_path):
    path = tmp_path / "expenses.json"
    path.write_text(
        json.dumps(
            [
                {"date": "2025-09-05", "category": "Groceries", "vendor": "Market", "amount": 50},
                {"date": "2025-09-06", "vendor": "Cafe", "amount": 4.5},
            ]
        ),
        encoding="utf-8",
    )

    store = load_expenses(path)

    assert len(store) == 2
    assert store[1].category is None
    assert store[1].category_label == "Uncategorized"


def test_load_json_wrapped_in_object(tmp_path):
    path = tmp_path / "expenses.json"
    path.write_text(
        json.dumps({"expenses": [{"date": "2025-09-05", "vendor": "Market", "amount": 1}]}),
        encoding="utf-8",
    )

    assert len(load_expenses(path)) == 1


def test_load_csv_treats_blank_category_as_missing(tmp_path):
    path = tmp_path / "expenses.csv"
    path.write_text(
        "date,category,vendor,amount\n"
        "2025-09-05,Groceries,Market,50.25\n"
        "2025-09-07, ,Corner Shop,3\n",
        encoding="utf-8",
    )

    store = load_expenses(path)

    assert [e.amount for e in store] == [50.25, 3.0]
    assert store[1].category is None
    assert store[1].month == "2025-09"


@pytest.mark.parametrize(
    "record",
    [
        {"date": "2025-9-5", "vendor": "Market", "amount": 1},
        {"date": "2025-02-30", "vendor": "Market", "amount": 1},
        {"date": "2025-09-05", "vendor": "", "amount": 1},
        {"date": "2025-09-05", "vendor": "Market", "amount": -1},
        {"date": "2025-09-05", "vendor": "Market", "amount": float("inf")},
        {"date": "2025-09-05", "vendor": "Market", "amount": float("nan")},
    ],
)
def test_invalid_records_reject_the_file(tmp_path, record):
    path = tmp_path / "expenses.json"
    path.write_text(json.dumps([record]), encoding="utf-8")

    with pytest.raises(ExpenseLoadError):
        load_expenses(path)


def test_missing_and_unsupported_files(tmp_path):
    with pytest.raises(ExpenseLoadError):
        load_expenses(tmp_path / "absent.json")

    other = tmp_path / "expenses.txt"
    other.write_text("", encoding="utf-8")
    with pytest.raises(ExpenseLoadError):
        load_expenses(other)


def test_bundled_sample_data_loads():
    store = load_expenses(SAMPLE_DATA)

    assert len(store) > 0


def test_csv_with_infinite_amount_is_rejected(tmp_path):
    path = tmp_path / "expenses.csv"
    path.write_text("date,category,vendor,amount\n2025-09-05,Rent,Landlord,inf\n", encoding="utf-8")

    with pytest.raises(ExpenseLoadError):
        load_expenses(path)
