# frontend/test_contract_pdf.py
# Unit tests for the haji contract PDF

import sys
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.contract_pdf import (
    DEFAULT_HAJJ_TYPE,
    DEFAULT_PAYMENT_METHOD,
    PLACEHOLDER,
    contract_fields,
    contract_filename,
    contract_sections,
    format_mobile_bd,
    generate_haji_contract_pdf,
)

HAJI = {
    "id": 7,
    "name": "Abdul Karim",
    "father_name": "Abdul Rahim",
    "nid_number": "1990123456789",
    "passport_number": "A01234567",
    "address": "Mirpur, Dhaka",
    "mobile": "+880 1712-345678",
    "package_name": "Economy 2026",
    "total_amount": 650000,
}


def test_format_mobile_bd():
    assert format_mobile_bd("01712345678") == "01712345678"
    assert format_mobile_bd("+880 1712-345678") == "01712345678"
    assert format_mobile_bd("12345") == "12345"
    assert format_mobile_bd("") == "N/A"
    assert format_mobile_bd(None) == "N/A"
    assert format_mobile_bd(1712345678) == "N/A"


def test_contract_filename_is_safe_and_dated():
    name = contract_filename({"name": "Abdul/Karim: Jr."}, date(2026, 10, 19))
    assert name == "হজ্ব_চুক্তিপত্র_Abdul_Karim_ Jr__2026-10-19.pdf"
    assert contract_filename({}, date(2026, 1, 2)) == "হজ্ব_চুক্তিপত্র_haji_2026-01-02.pdf"


def test_contract_filename_keeps_bengali_and_caps_length():
    assert contract_filename({"name": "আব্দুল করিম"}, date(2026, 10, 19)).startswith("হজ্ব_চুক্তিপত্র_আব্দুল করিম_")
    long_name = "x" * 80
    assert f"_{'x' * 40}_" in contract_filename({"name": long_name}, date(2026, 10, 19))


def test_contract_fields_read_snake_and_camel_case():
    fields = contract_fields(HAJI, agency_name="Test Travels")
    assert fields["agencyName"] == "Test Travels"
    assert fields["hajiName"] == "Abdul Karim"
    assert fields["fatherName"] == "Abdul Rahim"
    assert fields["passportNumber"] == "A01234567"
    assert fields["mobile"] == "01712345678"
    assert fields["packageCategory"] == "Economy 2026"
    assert fields["totalAmount"] == "৬,৫০,০০০ টাকা মাত্র"

    camel = contract_fields({"name": "R", "fatherName": "F", "passportNumber": "P1", "totalAmount": 1000})
    assert camel["fatherName"] == "F"
    assert camel["passportNumber"] == "P1"
    assert camel["totalAmount"] == "১,০০০ টাকা মাত্র"


def test_contract_fields_fill_blanks():
    fields = contract_fields({})
    assert fields["hajiName"] == PLACEHOLDER
    assert fields["mobile"] == "N/A"
    assert fields["hajjType"] == DEFAULT_HAJJ_TYPE
    assert fields["paymentMethod"] == DEFAULT_PAYMENT_METHOD
    assert fields["totalAmount"] == "০ টাকা মাত্র"
    assert fields["agencyLicense"] == PLACEHOLDER


def test_package_data_overrides_haji_package():
    fields = contract_fields(HAJI, {"package_name": "VIP", "duration": 40, "packageType": "বেসরকারি"})
    assert fields["packageCategory"] == "VIP"
    assert fields["duration"] == "40"
    assert fields["hajjType"] == "বেসরকারি"


def test_contract_has_ten_sections_in_order():
    sections = contract_sections(contract_fields(HAJI), date(2026, 10, 19))
    headings = [s["heading"] for s in sections]
    assert len(headings) == 10
    assert headings[0] == "১. এজেন্সির তথ্য"
    assert headings[-1] == "১০. স্বাক্ষর"

    signatures = sections[-1]["signatures"]
    assert ("তারিখ", "১৯ অক্টোবর, ২০২৬") in signatures[0]
    assert ("নাম", "Abdul Karim") in signatures[0]


def test_generate_pdf_with_builtin_font():
    result = generate_haji_contract_pdf(HAJI, today=date(2026, 10, 19), font_path="")
    assert result["success"] is True
    assert result["content"].startswith(b"%PDF")
    assert result["pages"] >= 1
    assert result["filename"] == "হজ্ব_চুক্তিপত্র_Abdul Karim_2026-10-19.pdf"


def test_generate_pdf_missing_font_falls_back():
    result = generate_haji_contract_pdf({"name": "X"}, font_path="/nonexistent/font.ttf")
    assert result["success"] is True
    assert result["content"].startswith(b"%PDF")
