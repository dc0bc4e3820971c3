"""
IPO quality scoring.

Every metric is mapped linearly between a "worst" and a "best" breakpoint onto
0-10 and clamped. Missing metrics are skipped, never treated as zero, so a
partial bundle gives a partial (nullable) score card. The engine is a pure
function of the bundle: no clock, no randomness, no I/O.
"""
from typing import List, Optional, Tuple

from iposcore.schemas.ipo import FinancialBundle, RiskLevel, ScoreCard

MAX_SCORE = 10.0

# (worst, best) breakpoints; worst > best means lower is better
REVENUE_GROWTH_BP = (0.0, 30.0)
EBITDA_MARGIN_BP = (5.0, 25.0)
PAT_MARGIN_BP = (2.0, 15.0)
ROE_BP = (5.0, 20.0)
ROCE_BP = (5.0, 22.0)
DEBT_TO_EQUITY_BP = (2.0, 0.3)

PE_PREMIUM_BP = (1.5, 0.8)  # IPO P/E ÷ sector median
PB_RATIO_BP = (8.0, 1.5)

OFS_RATIO_BP = (0.6, 0.1)
PROMOTER_DROP_BP = (15.0, 2.0)  # percentage points lost at listing

MIN_FUNDAMENTAL_INPUTS = 2
MIN_VALUATION_INPUTS = 1
MIN_GOVERNANCE_INPUTS = 1

FUNDAMENTALS_WEIGHT = 0.35
VALUATION_WEIGHT = 0.35
GOVERNANCE_WEIGHT = 0.30

CONSERVATIVE_MIN = 7.5
MODERATE_MIN = 4.0

# narrative thresholds
WEAK_GROWTH, STRONG_GROWTH = 10.0, 25.0
THIN_PAT_MARGIN, HEALTHY_EBITDA_MARGIN = 5.0, 20.0
LOW_ROE, HIGH_ROE = 10.0, 18.0
HIGH_LEVERAGE, LOW_LEVERAGE = 1.0, 0.5
PE_PREMIUM_FLAG = 1.3
EXPENSIVE_PB, CHEAP_PB = 5.0, 2.0
HIGH_OFS, LOW_OFS = 0.4, 0.2
LARGE_PROMOTER_DROP, SMALL_PROMOTER_DROP = 10.0, 5.0
STRONG_PROMOTER_RETENTION = 60.0


def scale(value: float, worst: float, best: float) -> float:
    """Linear 0-10 position of value between worst and best, clamped."""
    t = (value - worst) / (best - worst)
    return MAX_SCORE * min(1.0, max(0.0, t))


def _average(parts: List[float], minimum: int) -> Optional[float]:
    if len(parts) < minimum:
        return None
    return round(sum(parts) / len(parts), 1)


def _pe_premium(b: FinancialBundle) -> Optional[float]:
    if b.pe_ratio is None or not b.sector_pe_median or b.sector_pe_median <= 0:
        return None
    return b.pe_ratio / b.sector_pe_median


def _promoter_drop(b: FinancialBundle) -> Optional[float]:
    if b.promoter_holding is None or b.post_ipo_promoter_holding is None:
        return None
    return b.promoter_holding - b.post_ipo_promoter_holding


def fundamentals_score(b: FinancialBundle) -> Optional[float]:
    metrics = (
        (b.revenue_growth, REVENUE_GROWTH_BP),
        (b.ebitda_margin, EBITDA_MARGIN_BP),
        (b.pat_margin, PAT_MARGIN_BP),
        (b.roe, ROE_BP),
        (b.roce, ROCE_BP),
        (b.debt_to_equity, DEBT_TO_EQUITY_BP),
    )
    parts = [scale(value, *bp) for value, bp in metrics if value is not None]
    return _average(parts, MIN_FUNDAMENTAL_INPUTS)


def valuation_score(b: FinancialBundle) -> Optional[float]:
    parts = []
    premium = _pe_premium(b)
    if premium is not None:
        # loss-making issuers have no meaningful P/E
        parts.append(scale(premium, *PE_PREMIUM_BP) if b.pe_ratio > 0 else 0.0)
    if b.pb_ratio is not None:
        parts.append(scale(b.pb_ratio, *PB_RATIO_BP) if b.pb_ratio > 0 else 0.0)
    return _average(parts, MIN_VALUATION_INPUTS)


def governance_score(b: FinancialBundle) -> Optional[float]:
    parts = []
    if b.ofs_ratio is not None:
        parts.append(scale(b.ofs_ratio, *OFS_RATIO_BP))
    drop = _promoter_drop(b)
    if drop is not None:
        parts.append(scale(drop, *PROMOTER_DROP_BP))
    return _average(parts, MIN_GOVERNANCE_INPUTS)


def overall_score(fundamentals: Optional[float], valuation: Optional[float],
                  governance: Optional[float]) -> Optional[float]:
    """Weighted mean renormalised over the sub-scores that exist."""
    weighted = [
        (score, weight)
        for score, weight in (
            (fundamentals, FUNDAMENTALS_WEIGHT),
            (valuation, VALUATION_WEIGHT),
            (governance, GOVERNANCE_WEIGHT),
        )
        if score is not None
    ]
    if not weighted:
        return None
    total_weight = sum(w for _, w in weighted)
    return round(sum(s * w for s, w in weighted) / total_weight, 1)


def classify_risk(score: Optional[float]) -> Optional[RiskLevel]:
    """High composite quality reads as the lower-risk 'conservative' pick."""
    if score is None:
        return None
    if score >= CONSERVATIVE_MIN:
        return "conservative"
    if score >= MODERATE_MIN:
        return "moderate"
    return "aggressive"


def narrative(b: FinancialBundle) -> Tuple[List[str], List[str]]:
    """(red_flags, pros), both in fixed metric order."""
    flags: List[str] = []
    pros: List[str] = []

    if b.revenue_growth is not None:
        if b.revenue_growth < WEAK_GROWTH:
            flags.append(f"Weak revenue growth ({b.revenue_growth:.1f}%)")
        elif b.revenue_growth >= STRONG_GROWTH:
            pros.append(f"Strong revenue growth ({b.revenue_growth:.1f}%)")

    if b.ebitda_margin is not None and b.ebitda_margin >= HEALTHY_EBITDA_MARGIN:
        pros.append(f"Healthy EBITDA margin ({b.ebitda_margin:.1f}%)")
    if b.pat_margin is not None and b.pat_margin < THIN_PAT_MARGIN:
        flags.append(f"Thin profit margin ({b.pat_margin:.1f}%)")

    if b.roe is not None:
        if b.roe < LOW_ROE:
            flags.append(f"Low return on equity ({b.roe:.1f}%)")
        elif b.roe >= HIGH_ROE:
            pros.append(f"High return on equity ({b.roe:.1f}%)")

    if b.debt_to_equity is not None:
        if b.debt_to_equity > HIGH_LEVERAGE:
            flags.append(f"High leverage (debt/equity {b.debt_to_equity:.2f})")
        elif b.debt_to_equity <= LOW_LEVERAGE:
            pros.append(f"Low leverage (debt/equity {b.debt_to_equity:.2f})")

    premium = _pe_premium(b)
    if premium is not None:
        if premium >= PE_PREMIUM_FLAG:
            flags.append(
                f"Priced at {premium:.1f}x the sector P/E median ({b.pe_ratio:.1f} vs {b.sector_pe_median:.1f})"
            )
        elif 0 < premium < 1:
            pros.append(f"Priced below sector P/E median ({b.pe_ratio:.1f} vs {b.sector_pe_median:.1f})")

    if b.pb_ratio is not None:
        if b.pb_ratio > EXPENSIVE_PB:
            flags.append(f"Expensive on book value (P/B {b.pb_ratio:.1f})")
        elif 0 < b.pb_ratio <= CHEAP_PB:
            pros.append(f"Reasonable price to book (P/B {b.pb_ratio:.1f})")

    if b.ofs_ratio is not None:
        if b.ofs_ratio > HIGH_OFS:
            flags.append(f"Large offer-for-sale component ({b.ofs_ratio:.0%} of issue)")
        elif b.ofs_ratio <= LOW_OFS:
            pros.append("Mostly fresh issue: proceeds go into the business")

    drop = _promoter_drop(b)
    if drop is not None:
        if drop > LARGE_PROMOTER_DROP:
            flags.append(f"Promoter holding falls {drop:.1f} pts after listing")
        elif drop <= SMALL_PROMOTER_DROP and b.post_ipo_promoter_holding >= STRONG_PROMOTER_RETENTION:
            pros.append(f"Promoters retain {b.post_ipo_promoter_holding:.1f}% after listing")

    return flags, pros


def score_financials(bundle: FinancialBundle) -> ScoreCard:
    fundamentals = fundamentals_score(bundle)
    valuation = valuation_score(bundle)
    governance = governance_score(bundle)
    overall = overall_score(fundamentals, valuation, governance)
    red_flags, pros = narrative(bundle)

    return ScoreCard(
        fundamentals_score=fundamentals,
        valuation_score=valuation,
        governance_score=governance,
        overall_score=overall,
        risk_level=classify_risk(overall),
        red_flags=red_flags,
        pros=pros,
    )
