from datetime import date

import pytest

from iposcore.analysis.synthesizer import SyntheticFinancials
from iposcore.core.errors import ListingsUnavailableError, SourceFetchError
from iposcore.pipeline import build_scored_ipo, run_pipeline, scrape_listings, score_listings
from iposcore.schemas.ipo import FinancialBundle, GmpRecord, RawListing

DASHBOARD_URL = "https://ipo.test/dashboard"
REPORT_URL = "https://ipo.test/report"
GMP_URL_1 = "https://ipo.test/gmp/104"
GMP_URL_2 = "https://ipo.test/gmp/90"

DASHBOARD_HTML = """
<table>
  <tr><td><a href="/ipo/abc/1/">ABC Ltd IPO</a></td><td>5 Jan, 2025 - 15 Jan, 2025</td>
      <td>₹95 to ₹100</td><td>500 Cr</td><td>150</td></tr>
  <tr><td>Delta Corp Ltd IPO</td><td>1 Feb, 2025 - 4 Feb, 2025</td><td>₹210</td><td>300 Cr</td><td>70</td></tr>
</table>
"""

REPORT_HTML = """
<table>
  <tr><td>Omega Steel Ltd IPO</td><td>Dec 2, 2024</td><td>Dec 4, 2024</td><td>₹50 to ₹55</td><td>120 Cr</td></tr>
</table>
"""

GMP_HTML = """
<table>
  <tr><td>ABC IPO</td><td>₹25</td><td>₹125</td></tr>
  <tr><td>Unrelated Co IPO</td><td>₹7</td><td>₹60</td></tr>
</table>
"""

TODAY = date(2025, 1, 10)


class FakeFetch:
    """Serves canned HTML per URL; exceptions in the mapping are raised."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        page = self.pages.get(url, "")
        if isinstance(page, Exception):
            raise page
        return page


class FixedFinancials:
    def __init__(self, bundle):
        self.bundle = bundle
        self.sectors = []

    def fetch(self, sector):
        self.sectors.append(sector)
        return self.bundle


def _run(pages, **kwargs):
    fetch = FakeFetch(pages)
    scored = run_pipeline(
        fetch=fetch,
        data_source=kwargs.pop("data_source", SyntheticFinancials(seed=11)),
        listing_urls=[DASHBOARD_URL, REPORT_URL],
        gmp_urls=[GMP_URL_1, GMP_URL_2],
        today=TODAY,
        **kwargs,
    )
    return scored, fetch


def test_listings_joined_with_gmp_by_symbol():
    scored, _ = _run({DASHBOARD_URL: DASHBOARD_HTML, GMP_URL_1: GMP_HTML})
    by_symbol = {s.symbol: s for s in scored}

    abc = by_symbol["ABC"]
    assert abc.gmp == 25
    assert abc.expected_listing_price == 125
    assert abc.gmp_percentage == 25.0
    assert abc.min_investment == "₹15,000"
    assert abc.status == "open"
    assert abc.open_date == "2025-01-05"
    assert abc.expected_date == "2025-01-05"
    assert abc.close_date == "2025-01-15"
    assert abc.detail_url == "https://www.chittorgarh.com/ipo/abc/1/"

    delta = by_symbol["DELTACORP"]
    assert delta.gmp is None
    assert delta.expected_listing_price is None
    assert delta.gmp_percentage is None
    assert delta.status == "upcoming"
    assert delta.price_range == "₹210"
    assert delta.min_investment == "₹14,700"


def test_every_record_is_scored():
    scored, _ = _run({DASHBOARD_URL: DASHBOARD_HTML, GMP_URL_1: GMP_HTML})
    for ipo in scored:
        assert ipo.overall_score is not None
        assert ipo.risk_level in ("conservative", "moderate", "aggressive")
        assert ipo.sector
        assert ipo.revenue_growth is not None
        assert ipo.subscription_qib is None


def test_gmp_fetch_failure_degrades_to_null_gmp():
    scored, fetch = _run({
        DASHBOARD_URL: DASHBOARD_HTML,
        GMP_URL_1: SourceFetchError(GMP_URL_1, "timeout"),
        GMP_URL_2: SourceFetchError(GMP_URL_2, "503"),
    })
    assert len(scored) == 2
    assert all(s.gmp is None for s in scored)
    assert GMP_URL_2 in fetch.calls


def test_unexpected_gmp_error_does_not_abort_run():
    scored, _ = _run({DASHBOARD_URL: DASHBOARD_HTML, GMP_URL_1: RuntimeError("parser blew up")})
    assert [s.symbol for s in scored] == ["ABC", "DELTACORP"]
    assert all(s.gmp is None for s in scored)


def test_second_gmp_source_used_when_first_is_empty():
    scored, fetch = _run({DASHBOARD_URL: DASHBOARD_HTML, GMP_URL_1: "<p>empty</p>", GMP_URL_2: GMP_HTML})
    assert {s.symbol: s.gmp for s in scored}["ABC"] == 25
    assert fetch.calls.count(GMP_URL_2) == 1


def test_gmp_sources_after_a_hit_are_not_fetched():
    _, fetch = _run({DASHBOARD_URL: DASHBOARD_HTML, GMP_URL_1: GMP_HTML, GMP_URL_2: GMP_HTML})
    assert GMP_URL_2 not in fetch.calls


def test_falls_back_to_secondary_listings_source():
    scored, fetch = _run({DASHBOARD_URL: "<html><body>no tables today</body></html>", REPORT_URL: REPORT_HTML})
    assert [s.symbol for s in scored] == ["OMEGASTEEL"]
    assert scored[0].status == "closed"
    assert fetch.calls.index(DASHBOARD_URL) < fetch.calls.index(REPORT_URL)


def test_falls_back_when_primary_fetch_fails():
    scored, _ = _run({DASHBOARD_URL: SourceFetchError(DASHBOARD_URL, "connection reset"), REPORT_URL: REPORT_HTML})
    assert [s.symbol for s in scored] == ["OMEGASTEEL"]


def test_total_listings_failure_raises():
    with pytest.raises(ListingsUnavailableError):
        _run({DASHBOARD_URL: "", REPORT_URL: SourceFetchError(REPORT_URL, "404"), GMP_URL_1: GMP_HTML})


def test_scrape_listings_prefers_primary_source():
    fetch = FakeFetch({DASHBOARD_URL: DASHBOARD_HTML, REPORT_URL: REPORT_HTML})
    listings = scrape_listings(fetch, [DASHBOARD_URL, REPORT_URL], TODAY)
    assert [l.symbol for l in listings] == ["ABC", "DELTACORP"]
    assert fetch.calls == [DASHBOARD_URL]


def test_sector_override_and_data_source_contract():
    source = FixedFinancials(FinancialBundle(revenue_growth=30, roe=20))
    listings = [RawListing(symbol="ABC", company_name="ABC Ltd", price_range_text="₹100")]
    scored = score_listings(listings, [], source, sectors={"ABC": "Energy"})
    assert source.sectors == ["Energy"]
    assert scored[0].sector == "Energy"
    assert scored[0].fundamentals_score == 10.0
    assert scored[0].valuation_score is None


def test_build_scored_ipo_with_unknowns():
    listing = RawListing(symbol="XYZCO", company_name="Xyz Co", open_date_text="TBA", close_date_text="TBA")
    ipo = build_scored_ipo(listing, GmpRecord(symbol="XYZCO", gmp=-4), FixedFinancials(FinancialBundle()))
    assert ipo.price_range == "TBA"
    assert ipo.lot_size is None
    assert ipo.min_investment is None
    assert ipo.open_date is None
    assert ipo.gmp == -4
    assert ipo.gmp_percentage is None
    assert ipo.overall_score is None
    assert ipo.risk_level is None
    assert ipo.sector == "Industrial"
    assert ipo.description == "Xyz Co IPO. Issue size: TBA. Sector: Industrial."


def test_scored_records_are_immutable():
    listing = RawListing(symbol="ABC", company_name="ABC Ltd")
    ipo = build_scored_ipo(listing, None, SyntheticFinancials(seed=1))
    with pytest.raises(Exception):
        ipo.overall_score = 1.0


def test_plain_exception_from_primary_listings_fetch_falls_back():
    scored, fetch = _run({
        DASHBOARD_URL: TimeoutError("primary timed out"),
        REPORT_URL: REPORT_HTML,
        GMP_URL_1: GMP_HTML,
    })
    assert [s.symbol for s in scored] == ["OMEGASTEEL"]
    assert REPORT_URL in fetch.calls


def test_plain_exception_from_gmp_fetch_tries_next_source():
    scored, fetch = _run({
        DASHBOARD_URL: DASHBOARD_HTML,
        GMP_URL_1: ConnectionError("reset by peer"),
        GMP_URL_2: GMP_HTML,
    })
    assert {s.symbol: s.gmp for s in scored}["ABC"] == 25
    assert GMP_URL_2 in fetch.calls
