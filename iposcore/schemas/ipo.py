from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime, timezone

IpoStatus = Literal["upcoming", "open", "closed"]
RiskLevel = Literal["conservative", "moderate", "aggressive"]

# --- Scraped Models ---

class RawListing(BaseModel):
    symbol: str = Field(min_length=3, max_length=12)
    company_name: str
    open_date_text: str = ""
    close_date_text: str = ""
    price_range_text: str = "TBA"
    lot_size: int = Field(default=0, ge=0)
    issue_size_text: str = "TBA"
    status: IpoStatus = "upcoming"
    detail_url: str = ""

    class Config:
        frozen = True

class GmpRecord(BaseModel):
    symbol: str
    gmp: int = 0
    expected_listing_price: int = Field(default=0, ge=0)

    class Config:
        frozen = True

# --- Analysis Models ---

class FinancialBundle(BaseModel):
    revenue_growth: Optional[float] = None
    ebitda_margin: Optional[float] = None
    pat_margin: Optional[float] = None
    roe: Optional[float] = None
    roce: Optional[float] = None
    debt_to_equity: Optional[float] = None

    pe_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    sector_pe_median: Optional[float] = None

    fresh_issue_percent: Optional[float] = None
    ofs_ratio: Optional[float] = None
    promoter_holding: Optional[float] = None
    post_ipo_promoter_holding: Optional[float] = None

    class Config:
        frozen = True

class ScoreCard(BaseModel):
    fundamentals_score: Optional[float] = None
    valuation_score: Optional[float] = None
    governance_score: Optional[float] = None
    overall_score: Optional[float] = None
    risk_level: Optional[RiskLevel] = None
    red_flags: List[str] = Field(default_factory=list)
    pros: List[str] = Field(default_factory=list)

    class Config:
        frozen = True

# --- MAIN SCORED IPO MODEL ---

class ScoredIpo(FinancialBundle, ScoreCard):
    symbol: str
    company_name: str
    price_range: str
    issue_size: str
    lot_size: Optional[int] = None
    min_investment: Optional[str] = None

    open_date: Optional[str] = None
    close_date: Optional[str] = None
    expected_date: Optional[str] = None
    status: IpoStatus = "upcoming"

    sector: Optional[str] = None
    description: Optional[str] = None
    detail_url: Optional[str] = None

    gmp: Optional[int] = None
    expected_listing_price: Optional[int] = None
    gmp_percentage: Optional[float] = None
    subscription_qib: Optional[float] = None
    subscription_hni: Optional[float] = None
    subscription_retail: Optional[float] = None

    scored_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        frozen = True
        from_attributes = True
