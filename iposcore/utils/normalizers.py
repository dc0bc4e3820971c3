import re
from datetime import date
from typing import Optional, Tuple

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

_DAY_MONTH_YEAR = re.compile(r"(\d{1,2})\s*([A-Za-z]+)\s*,?\s*(\d{4})")
_MONTH_DAY_YEAR = re.compile(r"([A-Za-z]+)\s+(\d{1,2})\s*,\s*(\d{4})")
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _iso(year: str, month_name: str, day: str) -> Optional[str]:
    month = MONTHS.get(month_name.lower())
    if not month:
        return None
    try:
        return date(int(year), month, int(day)).isoformat()
    except ValueError:
        return None


def normalize_date(value: Optional[str]) -> Optional[str]:
    """
    Converts '12 Nov, 2024' → '2024-11-12'
    Converts 'Wed, Jan 28, 2026' → '2026-01-28'
    Keeps '2024-11-12' as is. 'TBA', '-' and garbage → None
    """
    if not value:
        return None

    cleaned = re.sub(r"\s+", " ", value).strip()
    if not cleaned or cleaned.lower() == "tba" or cleaned == "-":
        return None

    m = _DAY_MONTH_YEAR.search(cleaned)
    if m:
        iso = _iso(m.group(3), m.group(2), m.group(1))
        if iso:
            return iso

    m = _MONTH_DAY_YEAR.search(cleaned)
    if m:
        iso = _iso(m.group(3), m.group(1), m.group(2))
        if iso:
            return iso

    if _ISO_DATE.fullmatch(cleaned):
        try:
            return date.fromisoformat(cleaned).isoformat()
        except ValueError:
            return None

    return None


def parse_int(value: Optional[str]) -> Optional[int]:
    """
    Converts '120 Shares' → 120
    """
    if not value:
        return None

    match = re.search(r"\d+", value.replace(",", ""))
    return int(match.group()) if match else None


def parse_signed_int(value: Optional[str]) -> Optional[int]:
    """
    Converts '₹-12 (-3.5%)' → -12, '+45' → 45
    """
    if not value:
        return None

    match = re.search(r"[+-]?\d+", value.replace(",", ""))
    return int(match.group()) if match else None


def parse_price_band(s: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """From '₹21 to ₹23' return (21.0, 23.0). From '₹23 per share' return (23.0, 23.0)."""
    if not s:
        return None, None
    nums = re.findall(r"(\d+(?:\.\d+)?)", s.replace(",", ""))
    if not nums:
        return None, None
    f = [float(x) for x in nums]
    return (min(f), max(f))


def format_inr(amount: float) -> str:
    """Indian digit grouping: 1234567 → '₹12,34,567', 1500.5 → '₹1,500.50'"""
    negative = amount < 0
    amount = abs(amount)
    whole = int(amount)
    fraction = round(amount - whole, 2)
    if fraction >= 1:
        whole += 1
        fraction = 0

    digits = str(whole)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])

    text = f"₹{digits}"
    if fraction:
        text += f"{fraction:.2f}"[1:]
    return f"-{text}" if negative else text
