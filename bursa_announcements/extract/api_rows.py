import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from bursa_announcements.core.config import settings
from bursa_announcements.schemas import AnnouncementRecord

from .base import BaseExtractor, ParseError
from .utils import build_record

logger = logging.getLogger(__name__)

# Column positions inside one row of the search API's "data" array
DATE_COLUMN = 1
COMPANY_COLUMN = 2
ANNOUNCEMENT_COLUMN = 3


def parse_page(raw_text: str) -> Dict[str, Any]:
    """Decode one page of the search API, which must be a JSON object."""
    try:
        page = json.loads(raw_text)
    except (TypeError, json.JSONDecodeError) as e:
        preview = (raw_text or "")[:200].replace("\n", " ")
        raise ParseError(f"Search API returned invalid JSON: {e}; body starts: {preview!r}") from e
    if not isinstance(page, dict) or not isinstance(page.get("data"), list):
        raise ParseError("Search API response has no 'data' array")
    return page


def records_total(page: Dict[str, Any]) -> int:
    try:
        return max(int(page.get("recordsTotal") or 0), 0)
    except (TypeError, ValueError):
        return 0


def _cell_text(cell_html: str) -> str:
    return BeautifulSoup(cell_html, "html.parser").get_text(" ", strip=True)


def _date_from_cell(cell_html: str) -> str:
    # the cell carries a mobile and a desktop rendering; the desktop one is the long date
    soup = BeautifulSoup(cell_html, "html.parser")
    desktop = soup.select_one(".d-lg-inline-block")
    if desktop is not None:
        return desktop.get_text(" ", strip=True)
    return soup.get_text(" ", strip=True)


def _link_from_cell(cell_html: str) -> Tuple[str, str]:
    anchor = BeautifulSoup(cell_html, "html.parser").find("a")
    if anchor is None:
        return "", ""
    return anchor.get("href") or "", anchor.get_text(" ", strip=True)


class ApiRowsExtractor(BaseExtractor):
    """Turns one page of the announcements search API into records."""

    def __init__(self, origin: Optional[str] = None, max_records: Optional[int] = None):
        self.origin = origin or settings.SITE_ORIGIN
        self.max_records = max_records or settings.API_PER_PAGE

    def rows_to_records(self, rows: List[Any]) -> List[AnnouncementRecord]:
        records: List[AnnouncementRecord] = []
        for row in rows:
            if not isinstance(row, list) or len(row) <= ANNOUNCEMENT_COLUMN:
                continue
            date_html, company_html, announcement_html = (
                str(row[DATE_COLUMN] or ""),
                str(row[COMPANY_COLUMN] or ""),
                str(row[ANNOUNCEMENT_COLUMN] or ""),
            )
            _, company = _link_from_cell(company_html)
            link, memo = _link_from_cell(announcement_html)
            record = build_record(
                _date_from_cell(date_html),
                company or _cell_text(company_html),
                link,
                memo,
                origin=self.origin,
            )
            if record is None:
                continue
            records.append(record)
            if len(records) >= self.max_records:
                break
        return records

    def extract(self, raw_text: str) -> List[AnnouncementRecord]:
        page = parse_page(raw_text)
        records = self.rows_to_records(page["data"])
        if not records:
            raise ParseError("Search API page contained no usable announcements")
        return records
