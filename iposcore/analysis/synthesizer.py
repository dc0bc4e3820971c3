"""
Placeholder fundamentals for IPOs whose filings have not been parsed.

`SyntheticFinancials` draws sector-conditioned ratios from fixed ranges so the
scoring engine can run end to end. A real feed (DRHP/RHP parser, data vendor)
only needs to implement `FinancialDataSource.fetch`.
"""
import random
from types import MappingProxyType
from typing import Mapping, Optional, Protocol, Tuple

from iposcore.schemas.ipo import FinancialBundle

Range = Tuple[float, float]


class FinancialDataSource(Protocol):
    def fetch(self, sector: str) -> FinancialBundle:
        ...


def _ranges(revenue_growth, ebitda_margin, pat_margin, roe, roce, debt_to_equity, pe_ratio, sector_pe_median):
    return MappingProxyType({
        "revenue_growth": revenue_growth,
        "ebitda_margin": ebitda_margin,
        "pat_margin": pat_margin,
        "roe": roe,
        "roce": roce,
        "debt_to_equity": debt_to_equity,
        "pe_ratio": pe_ratio,
        "sector_pe_median": sector_pe_median,
    })


DEFAULT_RANGES = _ranges((10, 35), (10, 25), (5, 18), (10, 22), (12, 25), (0.3, 1.2), (15, 40), 25)

# Indicative Indian mainboard ranges per sector
SECTOR_RANGES: Mapping[str, Mapping] = MappingProxyType({
    "Technology": _ranges((25, 60), (15, 35), (8, 25), (12, 30), (14, 35), (0, 0.5), (25, 60), 35),
    "Financial Services": _ranges((15, 35), (20, 45), (12, 30), (12, 22), (10, 18), (0.5, 2), (15, 35), 22),
    "Healthcare": _ranges((12, 30), (15, 30), (8, 20), (12, 25), (14, 28), (0.2, 1), (20, 45), 30),
    "Energy": _ranges((20, 50), (12, 28), (6, 18), (10, 22), (12, 25), (0.5, 1.5), (15, 35), 25),
    "Logistics & Transport": _ranges((18, 45), (8, 20), (4, 12), (10, 25), (12, 28), (0.3, 1.2), (18, 40), 28),
    "Consumer": _ranges((10, 25), (10, 25), (5, 15), (12, 28), (14, 30), (0.2, 0.8), (20, 45), 32),
})

# Sector independent offer structure
PB_RATIO_RANGE: Range = (1.5, 6)
FRESH_ISSUE_RANGE: Range = (30, 80)
OFS_RATIO_RANGE: Range = (0.1, 0.5)
PROMOTER_HOLDING_RANGE: Range = (55, 85)
OFS_DILUTION_FACTOR = 0.3


def ranges_for(sector: Optional[str]) -> Mapping:
    return SECTOR_RANGES.get(sector or "", DEFAULT_RANGES)


def post_ipo_holding(promoter_holding: float, ofs_ratio: float) -> float:
    """Promoter stake after the offer-for-sale portion dilutes it."""
    return round(promoter_holding * (1 - ofs_ratio * OFS_DILUTION_FACTOR), 1)


class SyntheticFinancials:
    """FinancialDataSource drawing uniform values from sector ranges."""

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng or random.Random(seed)

    def _draw(self, bounds: Range) -> float:
        low, high = bounds
        return round(self.rng.uniform(low, high), 1)

    def fetch(self, sector: str) -> FinancialBundle:
        r = ranges_for(sector)
        revenue_growth = self._draw(r["revenue_growth"])
        ebitda_margin = self._draw(r["ebitda_margin"])
        pat_margin = self._draw(r["pat_margin"])
        roe = self._draw(r["roe"])
        roce = self._draw(r["roce"])
        debt_to_equity = self._draw(r["debt_to_equity"])
        pe_ratio = self._draw(r["pe_ratio"])
        pb_ratio = self._draw(PB_RATIO_RANGE)
        fresh_issue_percent = self._draw(FRESH_ISSUE_RANGE)
        ofs_ratio = self._draw(OFS_RATIO_RANGE)
        promoter_holding = self._draw(PROMOTER_HOLDING_RANGE)

        return FinancialBundle(
            revenue_growth=revenue_growth,
            ebitda_margin=ebitda_margin,
            pat_margin=pat_margin,
            roe=roe,
            roce=roce,
            debt_to_equity=debt_to_equity,
            pe_ratio=pe_ratio,
            pb_ratio=pb_ratio,
            sector_pe_median=float(r["sector_pe_median"]),
            fresh_issue_percent=fresh_issue_percent,
            ofs_ratio=ofs_ratio,
            promoter_holding=promoter_holding,
            post_ipo_promoter_holding=post_ipo_holding(promoter_holding, ofs_ratio),
        )
