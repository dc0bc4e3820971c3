import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from iposcore.core.config import settings
from iposcore.core.logging_config import get_logger
from iposcore.schemas.ipo import RawListing
from iposcore.scraper.parser import (
    cell_link,
    cell_text,
    iter_table_rows,
    looks_like_header,
    make_soup,
    resolve_url,
)
from iposcore.scraper.status import classify_status
from iposcore.utils.normalizers import normalize_date, parse_int

logger = get_logger(__name__)

CORPORATE_SUFFIXES = ("Ltd", "Limited", "India", "Private", "Pvt", "Technologies", "Tech", "Industries", "Infra")
MIN_SYMBOL_LENGTH = 3
MAX_SYMBOL_LENGTH = 12


@dataclass(frozen=True)
class TableTemplate:
    """Column positions of one known listings page layout."""

    name: str
    min_cells: int
    name_col: int
    price_col: int
    date_range_col: Optional[int] = None
    open_col: Optional[int] = None
    close_col: Optional[int] = None
    issue_size_col: Optional[int] = None
    lot_size_col: Optional[int] = None


# ipo_dashboard.asp: Company | Open - Close | Price Band | Issue Size | Lot Size
DASHBOARD_TEMPLATE = TableTemplate(
    name="dashboard",
    min_cells=3,
    name_col=0,
    date_range_col=1,
    price_col=2,
    issue_size_col=3,
    lot_size_col=4,
)

# yearly mainboard report: Company | Open | Close | Price Band | Issue Size
REPORT_TEMPLATE = TableTemplate(
    name="report",
    min_cells=4,
    name_col=0,
    open_col=1,
    close_col=2,
    price_col=3,
    issue_size_col=4,
)

DEFAULT_TEMPLATES: Tuple[TableTemplate, ...] = (DASHBOARD_TEMPLATE, REPORT_TEMPLATE)


def clean_company_name(text: str) -> str:
    """'Zinka Logistics Solution Ltd IPO (BlackBuck)' → 'Zinka Logistics Solution Ltd'"""
    name = re.sub(r"\s*\(.*?\)", "", text or "")
    name = re.sub(r"\s+IPO$", "", name.strip(), flags=re.I)
    return name.strip()


def derive_symbol(company_name: str, suffixes: Sequence[str] = CORPORATE_SUFFIXES) -> str:
    """
    Strips corporate suffixes and non-alphanumerics, uppercases, caps at 12 chars.
    'Zinka Logistics Solution Ltd' → 'ZINKALOGISTI'
    """
    pattern = r"\s+(?:" + "|".join(re.escape(s) for s in suffixes) + r")\b\.?"
    stripped = re.sub(pattern, "", company_name or "", flags=re.I)
    return re.sub(r"[^A-Za-z0-9]", "", stripped).upper()[:MAX_SYMBOL_LENGTH]


def split_date_range(text: str) -> Tuple[str, str]:
    """
    'Nov 13, 2024 - Nov 18, 2024' → ('Nov 13, 2024', 'Nov 18, 2024')
    '12 Nov, 2024 to 14 Nov, 2024' → ('12 Nov, 2024', '14 Nov, 2024')
    A single date is used for both ends.
    """
    text = text or ""
    iso_dates = re.findall(r"\d{4}-\d{2}-\d{2}", text)
    if iso_dates:
        return iso_dates[0], iso_dates[1] if len(iso_dates) > 1 else iso_dates[0]

    parts = [p.strip() for p in re.split(r"\s*(?:–|-|\bto\b)\s*", text, flags=re.I) if p.strip()]
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else parts[0]


def _parse_row(cells, template: TableTemplate, base_url: str, today: Optional[date]) -> Optional[RawListing]:
    if len(cells) < template.min_cells:
        return None

    company_text = cell_text(cells, template.name_col)
    if len(company_text) < 3 or looks_like_header(company_text):
        return None

    company_name = clean_company_name(company_text)
    symbol = derive_symbol(company_name)
    if not company_name or len(symbol) < MIN_SYMBOL_LENGTH:
        return None

    if template.date_range_col is not None:
        open_text, close_text = split_date_range(cell_text(cells, template.date_range_col))
    else:
        open_text = cell_text(cells, template.open_col)
        close_text = cell_text(cells, template.close_col) or open_text

    href = cell_link(cells[template.name_col])

    return RawListing(
        symbol=symbol,
        company_name=company_name,
        open_date_text=open_text,
        close_date_text=close_text,
        price_range_text=cell_text(cells, template.price_col) or "TBA",
        lot_size=parse_int(cell_text(cells, template.lot_size_col)) or 0,
        issue_size_text=cell_text(cells, template.issue_size_col) or "TBA",
        status=classify_status(normalize_date(open_text), normalize_date(close_text), today),
        detail_url=resolve_url(href, base_url),
    )


def extract_with_template(html: str, template: TableTemplate, base_url: Optional[str] = None,
                          today: Optional[date] = None) -> List[RawListing]:
    """All listings one template can read from a page; first row per symbol wins."""
    base_url = base_url or settings.BASE_URL
    listings: List[RawListing] = []
    seen = set()
    for cells in iter_table_rows(make_soup(html)):
        listing = _parse_row(cells, template, base_url, today)
        if listing is None:
            continue
        if listing.symbol in seen:
            logger.debug("Dropping duplicate listing row for %s", listing.symbol)
            continue
        seen.add(listing.symbol)
        listings.append(listing)
    return listings


def extract_listings(html: str, templates: Sequence[TableTemplate] = DEFAULT_TEMPLATES,
                     base_url: Optional[str] = None, today: Optional[date] = None) -> List[RawListing]:
    """Tries each template in order; the first one yielding rows wins."""
    for template in templates:
        listings = extract_with_template(html, template, base_url, today)
        if listings:
            logger.info("Extracted %d listings with the %s template", len(listings), template.name)
            return listings
        logger.debug("Template %s matched no rows", template.name)
    return []
