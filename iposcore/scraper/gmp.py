from typing import Dict, Iterable, List

from iposcore.core.logging_config import get_logger
from iposcore.schemas.ipo import GmpRecord
from iposcore.scraper.listings import CORPORATE_SUFFIXES, MIN_SYMBOL_LENGTH, clean_company_name, derive_symbol
from iposcore.scraper.parser import cell_text, iter_table_rows, looks_like_header, make_soup
from iposcore.utils.normalizers import parse_int, parse_signed_int

logger = get_logger(__name__)

GMP_SUFFIXES = CORPORATE_SUFFIXES + ("IPO",)

# GMP report: Company | GMP | Expected Listing | ...
NAME_COL, GMP_COL, EXPECTED_COL = 0, 1, 2
MIN_CELLS = 2


def parse_gmp_page(html: str) -> List[GmpRecord]:
    """GMP records of one report page, first row per symbol wins."""
    records: List[GmpRecord] = []
    seen = set()
    for cells in iter_table_rows(make_soup(html)):
        if len(cells) < MIN_CELLS:
            continue
        company = cell_text(cells, NAME_COL)
        if len(company) < 3 or looks_like_header(company):
            continue

        symbol = derive_symbol(clean_company_name(company), GMP_SUFFIXES)
        if len(symbol) < MIN_SYMBOL_LENGTH or symbol in seen:
            continue
        seen.add(symbol)

        records.append(GmpRecord(
            symbol=symbol,
            gmp=parse_signed_int(cell_text(cells, GMP_COL)) or 0,
            expected_listing_price=parse_int(cell_text(cells, EXPECTED_COL)) or 0,
        ))
    return records


def extract_gmp(pages: Iterable[str]) -> List[GmpRecord]:
    """
    Walks candidate pages in priority order and returns the records of the
    first page that yields any. `pages` may be a lazy generator so later
    sources are never fetched once one wins.
    """
    for index, html in enumerate(pages):
        records = parse_gmp_page(html)
        if records:
            logger.info("Found GMP data for %d IPOs (source #%d)", len(records), index + 1)
            return records
        logger.debug("GMP source #%d yielded no rows", index + 1)
    return []


def gmp_by_symbol(records: Iterable[GmpRecord]) -> Dict[str, GmpRecord]:
    """Exact-symbol lookup; keeps the first record per symbol."""
    out: Dict[str, GmpRecord] = {}
    for record in records:
        out.setdefault(record.symbol, record)
    return out
