import html
import re
from typing import Optional
from urllib.parse import urljoin

from bursa_announcements.schemas import AnnouncementRecord

TRUNCATION_MARKER = "..."

# Slot capacities in characters, one per record field
DATE_CAPACITY = 32
COMPANY_CAPACITY = 256
LINK_CAPACITY = 1024
MEMO_CAPACITY = 512


def truncate_field(value: str, capacity: int, marker: str = TRUNCATION_MARKER) -> str:
    """
    Fit value into a slot of `capacity` characters.
    Examples (capacity 8): 'short' -> 'short', 'much too long' -> 'much ...'
    """
    if capacity <= len(marker):
        raise ValueError("capacity must be larger than the truncation marker")
    if len(value) <= capacity:
        return value
    return value[: capacity - len(marker)] + marker


def clean_cell_text(text: Optional[str]) -> str:
    """Decode entities and collapse whitespace inside a table cell."""
    if not text:
        return ""
    text = html.unescape(text)
    text = re.sub(r"\u00a0", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def absolutize_link(link: str, origin: str) -> str:
    """
    Resolve a link found in markup against the site origin.
    '/ann/1' -> 'https://www.bursamalaysia.com/ann/1'; absolute links pass through.
    """
    link = link.strip()
    if not link:
        return ""
    resolved = urljoin(origin.rstrip("/") + "/", link)
    if not resolved.startswith(("http://", "https://")):
        # javascript:, mailto: and similar are not downloadable
        return ""
    return resolved


def build_record(
    date: Optional[str],
    company: Optional[str],
    link: Optional[str],
    memo: Optional[str],
    origin: str,
) -> Optional[AnnouncementRecord]:
    """
    Normalize the four raw fields into a record, or None when any of them
    ends up empty. Each field is cut to its slot capacity.
    """
    date = truncate_field(clean_cell_text(date), DATE_CAPACITY)
    company = truncate_field(clean_cell_text(company), COMPANY_CAPACITY)
    memo = truncate_field(clean_cell_text(memo), MEMO_CAPACITY)
    raw_link = html.unescape(link or "").strip()
    download_link = truncate_field(absolutize_link(raw_link, origin), LINK_CAPACITY) if raw_link else ""

    if not (date and company and download_link and memo):
        return None

    return AnnouncementRecord(
        announcement_date=date,
        company=company,
        download_link=download_link,
        memo=memo,
    )
