from bs4 import BeautifulSoup, Tag
from typing import Iterator, List, Optional
from urllib.parse import urljoin, urlparse

from iposcore.utils.helpers import clean_text

HEADER_MARKERS = ("company", "ipo name")


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def iter_table_rows(soup: BeautifulSoup) -> Iterator[List[Tag]]:
    """
    Yields the <td> cells of every row of every table, in document order.
    Header rows made of <th> only yield an empty list and are skipped.
    """
    for table in soup.find_all("table"):
        for tr in table.find_all("tr"):
            cells = tr.find_all("td")
            if cells:
                yield cells


def cell_text(cells: List[Tag], index: Optional[int]) -> str:
    """Cleaned text of cells[index], '' when the column is absent."""
    if index is None or index >= len(cells):
        return ""
    return clean_text(cells[index].get_text())


def cell_link(cell: Tag) -> Optional[str]:
    """href of the first anchor inside a cell"""
    a = cell.find("a", href=True)
    return a.get("href") if a else None


def looks_like_header(text: str) -> bool:
    t = (text or "").lower()
    return any(marker in t for marker in HEADER_MARKERS)


def resolve_url(href: Optional[str], base_url: str) -> str:
    """Keeps 'https://...' links, resolves '/ipo/...' against the site origin."""
    if not href:
        return ""
    href = href.strip()
    if urlparse(href).scheme:
        return href
    return urljoin(base_url.rstrip("/") + "/", href)
