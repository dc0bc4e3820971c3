from typing import List
from fastapi import APIRouter, HTTPException
from iposcore.analysis.scoring import score_financials
from iposcore.core.errors import ListingsUnavailableError
from iposcore.pipeline import run_pipeline
from iposcore.schemas.ipo import FinancialBundle, ScoreCard, ScoredIpo

router = APIRouter(prefix="/ipo", tags=["IPO"])


@router.get("/scored", response_model=List[ScoredIpo])
def scored_ipos():
    """Scrape the listings and GMP pages and return one scored snapshot per IPO."""
    try:
        return run_pipeline()
    except ListingsUnavailableError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/score", response_model=ScoreCard)
def score_bundle(body: FinancialBundle):
    """Score a financial bundle supplied by the caller (any field may be null)."""
    return score_financials(body)
