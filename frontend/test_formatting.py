# frontend/test_formatting.py
# Unit tests for Bengali number/date display helpers

import sys
from datetime import date
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.formatting import (
    NA,
    active_label,
    asset_type_label,
    format_currency,
    format_currency_en,
    format_date,
    format_date_bn,
    format_number_bn,
    payment_type_label,
    status_label,
    to_bengali_digits,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "০"),
        (999, "৯৯৯"),
        (1000, "১,০০০"),
        (150000, "১,৫০,০০০"),
        (12345678, "১,২৩,৪৫,৬৭৮"),
        (1234.5, "১,২৩৪.৫"),
        ("2500", "২,৫০০"),
        (-45000, "-৪৫,০০০"),
    ],
)
def test_format_number_bn_groups_in_lakh_style(value, expected):
    assert format_number_bn(value) == expected


def test_format_number_bn_rounds_to_three_places():
    assert format_number_bn(1.23456) == "১.২৩৫"
    assert format_number_bn(2.5000) == "২.৫"


def test_format_number_bn_invalid_input_is_zero():
    assert format_number_bn(None) == "০"
    assert format_number_bn("abc") == "০"
    assert format_number_bn("") == "০"
    assert format_number_bn(float("nan")) == "০"


def test_format_currency_prefixes_taka():
    assert format_currency(1500000) == "৳১৫,০০,০০০"
    assert format_currency(None) == "৳০"


def test_format_currency_en_uses_western_grouping():
    assert format_currency_en(1500000) == "৳1,500,000"
    assert format_currency_en(99.5) == "৳99.5"
    assert format_currency_en("oops") == "৳0"


def test_format_date_bn():
    assert format_date_bn("2026-10-19") == "১৯ অক্টোবর, ২০২৬"
    assert format_date_bn(date(2025, 1, 5)) == "৫ জানুয়ারী, ২০২৫"
    assert format_date_bn("2025-12-31T10:00:00Z") == "৩১ ডিসেম্বর, ২০২৫"


def test_format_date_bn_invalid_is_na():
    assert format_date_bn(None) == NA
    assert format_date_bn("") == NA
    assert format_date_bn("not a date") == NA
    assert format_date_bn(20251231) == NA


def test_format_date_iso():
    assert format_date("2025-03-07T08:00:00") == "2025-03-07"
    assert format_date(None) == NA


def test_to_bengali_digits_leaves_other_characters():
    assert to_bengali_digits("PNR-2025") == "PNR-২০২৫"


def test_labels():
    assert asset_type_label("Vehicle") == "যানবাহন"
    assert asset_type_label("Boat") == "Boat"
    assert asset_type_label(None) == NA

    assert status_label("Completed") == "সম্পন্ন"
    assert status_label("pending") == "অপেক্ষমান"
    assert status_label("on hold") == "on hold"
    assert status_label("") == NA

    assert payment_type_label("installment") == "কিস্তি"
    assert payment_type_label(None) == "এককালীন"

    assert active_label("Active") == "সক্রিয়"
    assert active_label("inactive") == "নিষ্ক্রিয়"
    assert active_label(None) == "নিষ্ক্রিয়"
