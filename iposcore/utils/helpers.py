import random
import time
import re

def human_delay(min_sec=1.0, max_sec=3.0):
    time.sleep(random.uniform(min_sec, max_sec))

def clean_text(text: str) -> str:
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()

def slugify_url(url: str) -> str:
    """'https://x.com/report/gmp/104/?year=2025' -> 'report-gmp-104-year-2025'"""
    path = re.sub(r"^https?://[^/]+", "", url or "")
    slug = re.sub(r"[^A-Za-z0-9]+", "-", path).strip("-")
    return slug or "index"
