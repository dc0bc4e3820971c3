from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from iposcore.analysis.scoring import score_financials
from iposcore.analysis.sector import detect_sector
from iposcore.analysis.synthesizer import FinancialDataSource, SyntheticFinancials
from iposcore.core.config import settings
from iposcore.core.errors import ListingsUnavailableError
from iposcore.core.logging_config import get_logger
from iposcore.schemas.ipo import GmpRecord, RawListing, ScoredIpo
from iposcore.scraper.fetcher import Fetch, get_fetcher
from iposcore.scraper.gmp import extract_gmp, gmp_by_symbol
from iposcore.scraper.listings import DASHBOARD_TEMPLATE, REPORT_TEMPLATE, TableTemplate, extract_listings
from iposcore.utils.normalizers import format_inr, normalize_date, parse_price_band

logger = get_logger(__name__)


def listing_sources(urls: Optional[Sequence[str]] = None) -> List[Tuple[str, Tuple[TableTemplate, ...]]]:
    """Pairs each listings URL with the template order to try on it."""
    urls = list(urls or settings.LISTING_URLS)
    sources = []
    for i, url in enumerate(urls):
        if i == 0:
            sources.append((url, (DASHBOARD_TEMPLATE, REPORT_TEMPLATE)))
        else:
            sources.append((url, (REPORT_TEMPLATE, DASHBOARD_TEMPLATE)))
    return sources


def scrape_listings(fetch: Fetch, urls: Optional[Sequence[str]] = None,
                    today: Optional[date] = None) -> List[RawListing]:
    """
    Tries each listings source in order and returns the first non-empty result.

    Raises:
        ListingsUnavailableError: when every source failed or yielded zero rows
    """
    for url, templates in listing_sources(urls):
        try:
            html = fetch(url)
        except Exception as e:
            logger.warning("Listings source %s failed, trying next: %s", url, e)
            continue
        listings = extract_listings(html, templates, today=today)
        if listings:
            logger.info("Found %d IPOs from %s", len(listings), url)
            return listings
        logger.warning("No listings extracted from %s, trying next source", url)
    raise ListingsUnavailableError("No listings source produced any IPO rows")


def _fetch_pages(fetch: Fetch, urls: Sequence[str]) -> Iterator[str]:
    for url in urls:
        try:
            yield fetch(url)
        except Exception as e:
            logger.warning("GMP source %s failed, trying next: %s", url, e)


def scrape_gmp(fetch: Fetch, urls: Optional[Sequence[str]] = None) -> List[GmpRecord]:
    return extract_gmp(_fetch_pages(fetch, list(urls or settings.GMP_URLS)))


def build_scored_ipo(
    listing: RawListing,
    gmp: Optional[GmpRecord],
    data_source: FinancialDataSource,
    sector: Optional[str] = None,
) -> ScoredIpo:
    """Joins one listing with its GMP row, fundamentals and score card."""
    _, upper_price = parse_price_band(listing.price_range_text)
    min_investment = format_inr(upper_price * listing.lot_size) if upper_price and listing.lot_size else None

    gmp_percentage = None
    if gmp is not None and upper_price:
        gmp_percentage = round(gmp.gmp / upper_price * 100, 1)

    sector = sector or detect_sector(listing.company_name)
    financials = data_source.fetch(sector)
    card = score_financials(financials)

    price_range = listing.price_range_text
    if price_range != "TBA" and "₹" not in price_range:
        price_range = f"₹{price_range}"

    open_date = normalize_date(listing.open_date_text)

    return ScoredIpo(
        symbol=listing.symbol,
        company_name=listing.company_name,
        price_range=price_range,
        issue_size=listing.issue_size_text,
        lot_size=listing.lot_size or None,
        min_investment=min_investment,
        open_date=open_date,
        close_date=normalize_date(listing.close_date_text),
        expected_date=open_date,
        status=listing.status,
        sector=sector,
        description=f"{listing.company_name} IPO. Issue size: {listing.issue_size_text}. Sector: {sector}.",
        detail_url=listing.detail_url or None,
        gmp=gmp.gmp if gmp else None,
        expected_listing_price=(gmp.expected_listing_price or None) if gmp else None,
        gmp_percentage=gmp_percentage,
        **financials.model_dump(),
        **card.model_dump(),
    )


def score_listings(
    listings: Sequence[RawListing],
    gmp_records: Sequence[GmpRecord],
    data_source: Optional[FinancialDataSource] = None,
    sectors: Optional[Mapping[str, str]] = None,
) -> List[ScoredIpo]:
    """Scores already extracted listings; `sectors` overrides detection per symbol."""
    data_source = data_source or SyntheticFinancials(seed=settings.SYNTHETIC_SEED)
    sectors = sectors or {}
    gmp_map: Dict[str, GmpRecord] = gmp_by_symbol(gmp_records)

    scored = [
        build_scored_ipo(listing, gmp_map.get(listing.symbol), data_source, sectors.get(listing.symbol))
        for listing in listings
    ]
    logger.info("Scored %d IPOs (%d with GMP)", len(scored), sum(1 for s in scored if s.gmp is not None))
    return scored


def run_pipeline(
    fetch: Optional[Fetch] = None,
    data_source: Optional[FinancialDataSource] = None,
    sectors: Optional[Mapping[str, str]] = None,
    listing_urls: Optional[Sequence[str]] = None,
    gmp_urls: Optional[Sequence[str]] = None,
    today: Optional[date] = None,
) -> List[ScoredIpo]:
    """
    One scoring run: fetch listings and GMP concurrently, join by symbol, score.

    A GMP failure of any kind degrades to "no GMP"; only a total listings
    failure propagates (ListingsUnavailableError).
    """
    fetch = fetch or get_fetcher()

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="iposcore") as executor:
        listings_future = executor.submit(scrape_listings, fetch, listing_urls, today)
        gmp_future = executor.submit(scrape_gmp, fetch, gmp_urls)

        try:
            gmp_records = gmp_future.result()
        except Exception:
            logger.exception("GMP scrape failed, continuing without GMP")
            gmp_records = []
        listings = listings_future.result()

    return score_listings(listings, gmp_records, data_source, sectors)
