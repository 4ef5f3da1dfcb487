# frontend/contract_pdf.py
# Hajj service contract (হজ্ব সেবা চুক্তিপত্র) as an A4 PDF, built with reportlab.
#
# The layout is pure data (contract_sections) so it can be checked without
# rendering; generate_haji_contract_pdf turns it into PDF bytes for
# st.download_button.

from __future__ import annotations

import io
import os
import re
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

try:
    from frontend.config import AGENCY_NAME, CONTRACT_FONT_PATH, IS_DEV
    from frontend.formatting import format_date_bn, format_number_bn
except ModuleNotFoundError:
    from config import AGENCY_NAME, CONTRACT_FONT_PATH, IS_DEV
    from formatting import format_date_bn, format_number_bn

PLACEHOLDER = "________________________"
LONG_PLACEHOLDER = "________________________________________"
MARGIN = 10 * mm
CONTRACT_TITLE = "হজ্ব সেবা চুক্তিপত্র"
DEFAULT_PAYMENT_METHOD = "নগদ / ব্যাংক / কিস্তি"
DEFAULT_HAJJ_TYPE = "সরকারি / বেসরকারি (যেটি প্রযোজ্য)"

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9ঀ-৿\s-]")

Row = Tuple[str, str]
Section = Dict[str, Any]


def format_mobile_bd(value: Any) -> str:
    """
    Normalize a Bangladeshi mobile number for print.

    11 digits starting 01 are kept, longer numbers (+8801...) keep their
    last 11 digits, anything else is printed as typed or N/A.
    """
    if not value or not isinstance(value, str):
        return "N/A"
    digits = re.sub(r"\D", "", value)
    if len(digits) == 11 and digits.startswith("01"):
        return digits
    if len(digits) >= 10:
        return digits[-11:]
    return value.strip() or "N/A"


def contract_filename(haji: Mapping[str, Any], today: Optional[date] = None) -> str:
    today = today or date.today()
    safe_name = _UNSAFE_NAME_CHARS.sub("_", str(haji.get("name") or "haji")).strip()[:40]
    return f"হজ্ব_চুক্তিপত্র_{safe_name}_{today.isoformat()}.pdf"


def _pick(source: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = source.get(key)
        if value not in (None, ""):
            return value
    return None


def contract_fields(
    haji: Mapping[str, Any],
    package_data: Optional[Mapping[str, Any]] = None,
    agency_name: Optional[str] = None,
) -> Dict[str, str]:
    """Every value printed on the contract, with blanks for what is unknown."""
    package_data = package_data or {}

    def text(*keys: str, source: Mapping[str, Any] = haji, blank: str = PLACEHOLDER) -> str:
        value = _pick(source, *keys)
        return str(value) if value is not None else blank

    package_category = _pick(package_data, "packageCategory", "package_name") or _pick(
        haji, "packageCategory", "package_name", "packageName"
    )
    duration = _pick(package_data, "duration") or _pick(haji, "packageDuration", "package_duration")
    total = _pick(haji, "totalAmount", "total_amount") or 0

    return {
        "agencyName": agency_name or AGENCY_NAME,
        "agencyLicense": PLACEHOLDER,
        "agencyAddress": PLACEHOLDER,
        "agencyPhone": PLACEHOLDER,
        "agencyRepresentative": PLACEHOLDER,
        "hajiName": text("name", "firstName", "first_name"),
        "fatherName": text("fatherName", "father_name"),
        "nidNumber": text("nidNumber", "nid_number"),
        "passportNumber": text("passportNumber", "passport_number"),
        "address": text("address"),
        "mobile": format_mobile_bd(_pick(haji, "mobile", "phone")),
        "hajjType": str(_pick(package_data, "packageType") or _pick(haji, "packageType") or DEFAULT_HAJJ_TYPE),
        "packageCategory": str(package_category) if package_category else PLACEHOLDER,
        "duration": str(duration) if duration else PLACEHOLDER,
        "seasonHijri": text("hajjSeasonHijri"),
        "seasonEnglish": text("hajjSeasonEnglish"),
        "totalAmount": f"{format_number_bn(total)} টাকা মাত্র",
        "paymentMethod": text("paymentMethod", "payment_method", blank=DEFAULT_PAYMENT_METHOD),
        "paymentDates": text("paymentDates", blank=LONG_PLACEHOLDER),
    }


def contract_sections(fields: Mapping[str, str], today: Optional[date] = None) -> List[Section]:
    """
    The ten numbered sections of the contract.

    Each section has a heading and any of: rows (label, value), intro text,
    bullets, closing text.
    """
    signed_on = format_date_bn(today or date.today())
    return [
        {
            "heading": "১. এজেন্সির তথ্য",
            "rows": [
                ("এজেন্সির নাম", fields["agencyName"]),
                ("লাইসেন্স নম্বর", fields["agencyLicense"]),
                ("ঠিকানা", fields["agencyAddress"]),
                ("ফোন নম্বর", fields["agencyPhone"]),
                ("প্রতিনিধির নাম ও পদবি", fields["agencyRepresentative"]),
            ],
        },
        {
            "heading": "২. হাজ্বীর তথ্য",
            "rows": [
                ("পূর্ণ নাম", fields["hajiName"]),
                ("পিতার নাম", fields["fatherName"]),
                ("জাতীয় পরিচয়পত্র নং", fields["nidNumber"]),
                ("পাসপোর্ট নং", fields["passportNumber"]),
                ("ঠিকানা", fields["address"]),
                ("মোবাইল নম্বর", fields["mobile"]),
            ],
        },
        {
            "heading": "৩. হজ প্যাকেজের বিবরণ",
            "rows": [
                ("হজের ধরন", fields["hajjType"]),
                ("প্যাকেজ ক্যাটাগরি", fields["packageCategory"]),
                ("মেয়াদ (দিন)", fields["duration"]),
                ("হজ মৌসুম", f"হিজরি {fields['seasonHijri']} / ইংরেজি {fields['seasonEnglish']}"),
            ],
        },
        {
            "heading": "৪. মোট খরচ ও পরিশোধের নিয়ম",
            "rows": [
                ("মোট প্যাকেজ মূল্য", fields["totalAmount"]),
                ("পরিশোধ পদ্ধতি", fields["paymentMethod"]),
                ("পরিশোধের তারিখসমূহ", fields["paymentDates"]),
            ],
            "intro": "এই খরচের মধ্যে অন্তর্ভুক্ত থাকবে—",
            "bullets": [
                "বিমান টিকিট (যাওয়া–আসা)",
                "হজ ভিসা প্রসেসিং",
                "মক্কা ও মদিনা হোটেল",
                "সৌদি আরবে লোকাল ট্রান্সপোর্ট",
                "মিনা, আরাফা, মুজদালিফা সেবা",
                "মুয়াল্লিম ও গ্রুপ সাপোর্ট",
            ],
        },
        {
            "heading": "৫. এজেন্সির দায়িত্ব",
            "intro": f"{fields['agencyName']} নিম্নোক্ত সেবা প্রদান করবে—",
            "bullets": [
                "হজ ভিসা প্রসেস করা",
                "বিমান টিকিট ব্যবস্থা করা",
                "সৌদি আরবে রিসিভ ও ড্রপ সার্ভিস",
                "নির্ধারিত মানের হোটেল ও পরিবহন প্রদান",
                "প্রয়োজনীয় হজ প্রশিক্ষণ ও গাইডলাইন প্রদান",
            ],
        },
        {
            "heading": "৬. হাজ্বীর দায়িত্ব",
            "intro": "হাজ্বী নিম্নোক্ত বিষয়সমূহ মানতে সম্মত থাকবেন—",
            "bullets": [
                "নির্ধারিত সময়মতো সকল টাকা পরিশোধ করা",
                "পাসপোর্ট ও প্রয়োজনীয় কাগজপত্র যথাসময়ে জমা দেওয়া",
                "গ্রুপের নিয়ম ও সৌদি আরবের আইন মেনে চলা",
                "শৃঙ্খলা বজায় রাখা ও নির্দেশনা অনুসরণ করা",
            ],
        },
        {
            "heading": "৭. বাতিল ও রিফান্ড নীতি",
            "bullets": [
                "হাজ্বী নিজে বাতিল করলে এজেন্সির নীতিমালা অনুযায়ী খরচ কর্তন করা হবে।",
                "ভিসা ও টিকিট ইস্যু হওয়ার পর বাতিল করলে সংশ্লিষ্ট চার্জ কাটা যাবে।",
                "সৌদি সরকার বা বাংলাদেশ সরকারের সিদ্ধান্তে হজ বাতিল হলে রিফান্ড সরকার ও এয়ারলাইনের নীতিমালা অনুযায়ী প্রযোজ্য হবে।",
            ],
        },
        {
            "heading": "৮. দায় ও সীমাবদ্ধতা",
            "bullets": [
                "ফ্লাইট বিলম্ব, হোটেল পরিবর্তন বা সৌদি সরকারের নির্দেশে পরিবর্তনের জন্য এজেন্সি সীমিত দায় বহন করবে।",
                "দুর্ঘটনা, অসুস্থতা বা প্রাকৃতিক দুর্যোগের জন্য এজেন্সি সরাসরি দায়ী থাকবে না।",
            ],
        },
        {
            "heading": "৯. চুক্তির মেয়াদ",
            "closing": "এই চুক্তি স্বাক্ষরের তারিখ হতে হজ কার্যক্রম সম্পন্ন হওয়া পর্যন্ত কার্যকর থাকবে।",
        },
        {
            "heading": "১০. স্বাক্ষর",
            "signatures": [
                [
                    ("হাজ্বীর স্বাক্ষর", "_______________________"),
                    ("তারিখ", signed_on),
                    ("নাম", fields["hajiName"]),
                ],
                [
                    ("এজেন্সি প্রতিনিধি", "_______________________"),
                    ("তারিখ", signed_on),
                    ("নাম ও পদবি", fields["agencyRepresentative"]),
                    ("অফিস সিল", ""),
                ],
            ],
        },
    ]


def _register_font(font_path: Optional[str]) -> Tuple[str, str]:
    """(regular, bold) font names; Helvetica when no Bengali TTF is configured."""
    if font_path and os.path.isfile(font_path):
        if "ContractBengali" not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont("ContractBengali", font_path))
        return "ContractBengali", "ContractBengali"
    if font_path and IS_DEV:
        print(f"[PDF] Contract font not found at {font_path}, using Helvetica")
    return "Helvetica", "Helvetica-Bold"


def _styles(regular: str, bold: str) -> Dict[str, ParagraphStyle]:
    return {
        "title": ParagraphStyle("title", fontName=bold, fontSize=20, leading=28, alignment=TA_CENTER, spaceAfter=6),
        "lead": ParagraphStyle("lead", fontName=regular, fontSize=11, leading=16, alignment=TA_CENTER, textColor=colors.HexColor("#333333")),
        "heading": ParagraphStyle("heading", fontName=bold, fontSize=14, leading=20, spaceBefore=10, spaceAfter=4),
        "body": ParagraphStyle("body", fontName=regular, fontSize=10.5, leading=16),
        "label": ParagraphStyle("label", fontName=bold, fontSize=10.5, leading=16),
        "bullet": ParagraphStyle("bullet", fontName=regular, fontSize=10, leading=16, leftIndent=14, bulletIndent=4),
        "footer": ParagraphStyle("footer", fontName=regular, fontSize=9, leading=13, alignment=TA_CENTER, textColor=colors.HexColor("#666666")),
    }


def _p(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text), style)


def _story(sections: List[Section], signed_on: str, width: float, styles: Dict[str, ParagraphStyle]) -> list:
    story: list = [
        _p(CONTRACT_TITLE, styles["title"]),
        _p(f"এই চুক্তিপত্র আজ {signed_on} তারিখে নিম্নস্বাক্ষরকারীদের মধ্যে সম্পাদিত হলো।", styles["lead"]),
        HRFlowable(width="100%", thickness=2, color=colors.black, spaceBefore=6, spaceAfter=6),
    ]
    for section in sections:
        story.append(_p(section["heading"], styles["heading"]))
        story.append(HRFlowable(width="100%", thickness=1, color=colors.HexColor("#333333"), spaceAfter=4))
        if section.get("rows"):
            table = Table(
                [[_p(label, styles["label"]), _p(":", styles["body"]), _p(value, styles["body"])] for label, value in section["rows"]],
                colWidths=[width * 0.35, width * 0.05, width * 0.60],
            )
            table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP"), ("BOTTOMPADDING", (0, 0), (-1, -1), 4)]))
            story.append(table)
        if section.get("intro"):
            story.append(Spacer(1, 4))
            story.append(_p(section["intro"], styles["body"]))
        for bullet in section.get("bullets", []):
            story.append(Paragraph(escape(bullet), styles["bullet"], bulletText="•"))
        if section.get("closing"):
            story.append(_p(section["closing"], styles["body"]))
        if section.get("signatures"):
            columns = [
                [_p(f"{label} : {value}", styles["body"]) for label, value in column]
                for column in section["signatures"]
            ]
            table = Table([columns], colWidths=[width * 0.5, width * 0.5])
            table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP"), ("TOPPADDING", (0, 0), (-1, -1), 16)]))
            story.append(table)
    story.append(Spacer(1, 18))
    story.append(HRFlowable(width="100%", thickness=1, color=colors.HexColor("#dddddd"), spaceAfter=6))
    story.append(_p("(সংযুক্তি: প্যাকেজ ডিটেইল শিট / খরচের ব্রেকডাউন / হোটেল তালিকা / সম্ভাব্য ফ্লাইট সূচি)", styles["footer"]))
    return story


def generate_haji_contract_pdf(
    haji: Mapping[str, Any],
    package_data: Optional[Mapping[str, Any]] = None,
    today: Optional[date] = None,
    agency_name: Optional[str] = None,
    font_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Render the contract for one haji.

    Returns:
        {"success": True, "filename", "content": bytes, "pages"} or
        {"success": False, "error"}; never raises.
    """
    today = today or date.today()
    try:
        regular, bold = _register_font(font_path if font_path is not None else CONTRACT_FONT_PATH)
        fields = contract_fields(haji, package_data, agency_name)
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=MARGIN,
            rightMargin=MARGIN,
            topMargin=MARGIN,
            bottomMargin=MARGIN,
            title=CONTRACT_TITLE,
        )
        story = _story(contract_sections(fields, today), format_date_bn(today), doc.width, _styles(regular, bold))
        doc.build(story)
    except Exception as e:
        print(f"[PDF] Haji contract failed: {type(e).__name__}: {e}")
        return {"success": False, "error": str(e) or "PDF generation failed"}

    filename = contract_filename(haji, today)
    if IS_DEV:
        print(f"[PDF] Haji contract generated pages={doc.page} file={filename}")
    return {"success": True, "filename": filename, "content": buffer.getvalue(), "pages": doc.page}
