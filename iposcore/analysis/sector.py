from typing import Tuple

DEFAULT_SECTOR = "Industrial"

# Checked top to bottom; first sector with a keyword hit wins.
SECTOR_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Healthcare", ("pharma", "health", "hospital", "medical", "nephro", "bio")),
    ("Technology", ("tech", "software", "digital", "info", "it ", "data", "ai", "cloud")),
    ("Financial Services", ("bank", "finance", "capital", "financial", "icici", "hdfc", "insurance", "prudent")),
    ("Energy", ("power", "energy", "solar", "electric", "renewable", "photovoltaic")),
    ("Consumer", ("food", "consumer", "retail", "mart", "store")),
    ("Infrastructure", ("infra", "construction", "real", "cement", "steel")),
    ("Logistics & Transport", ("auto", "motor", "vehicle", "logistics", "transport", "shadowfax")),
    ("Media & Entertainment", ("media", "entertain", "broadcast", "amagi")),
    ("Chemicals & Materials", ("chemical", "material", "metal")),
    ("Education & Technology", ("education", "learn", "physics", "school", "capillary", "excel")),
)

SECTORS: Tuple[str, ...] = tuple(name for name, _ in SECTOR_KEYWORDS) + (DEFAULT_SECTOR,)


def detect_sector(company_name: str) -> str:
    """Coarse keyword match on the company name, e.g. 'Apollo Hospital Enterprise' → 'Healthcare'."""
    name = (company_name or "").lower()
    for sector, keywords in SECTOR_KEYWORDS:
        if any(k in name for k in keywords):
            return sector
    return DEFAULT_SECTOR
