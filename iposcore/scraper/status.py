from datetime import date
from typing import Optional

from iposcore.schemas.ipo import IpoStatus


def classify_status(open_date: Optional[str], close_date: Optional[str], today: Optional[date] = None) -> IpoStatus:
    """
    Lifecycle status from ISO open/close dates.
    No open date → upcoming. Not re-derived from any stored status.
    """
    if not open_date:
        return "upcoming"

    today = today or date.today()
    opens = date.fromisoformat(open_date)
    closes = date.fromisoformat(close_date) if close_date else None

    if today < opens:
        return "upcoming"
    if closes and today > closes:
        return "closed"
    if today >= opens and (closes is None or today <= closes):
        return "open"
    return "upcoming"
