"""
Row-pattern extractor for the company announcements listing page.

The listing renders one announcement per table row:

    <tr>
      <td><div class='d-lg-inline-block d-none'>06 Oct 2025</div></td>
      <td><a href='/market_information/...?stock_code=1234'>ABC BHD</a></td>
      <td><a href='/market_information/.../announcement_details?ann_id=1'>Quarterly Report</a></td>
    </tr>

Only this row shape is recognized. The text is scanned left to right and the
cursor never moves backwards, so each character is consumed at most once.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from bursa_announcements.core.config import settings
from bursa_announcements.schemas import AnnouncementRecord

from .base import BaseExtractor, ParseError
from .utils import build_record

logger = logging.getLogger(__name__)

# Stays inside one table row and stops short of the next date cell
_WITHIN_ROW = r"(?:(?!</tr>|<tr[\s>]|d-lg-inline-block).)*?"

ROW_PATTERN = re.compile(
    r"<div[^>]*class=['\"][^'\"]*d-lg-inline-block[^'\"]*['\"][^>]*>(?P<date>[^<]*)</div>"
    + _WITHIN_ROW
    + r"<a[^>]*href=['\"][^'\"]*['\"][^>]*>(?P<company>[^<]*)</a>"
    + _WITHIN_ROW
    + r"<a[^>]*href=['\"](?P<link>[^'\"]*)['\"][^>]*>(?P<memo>[^<]*)</a>",
    re.IGNORECASE | re.DOTALL,
)

FIELD_GROUPS = ("date", "company", "link", "memo")


@dataclass
class ScanStep:
    start: int
    end: int
    record: Optional[AnnouncementRecord]


class MarkupExtractor(BaseExtractor):
    def __init__(
        self,
        origin: Optional[str] = None,
        max_records: Optional[int] = None,
        pattern: re.Pattern = ROW_PATTERN,
    ):
        self.origin = origin or settings.SITE_ORIGIN
        self.max_records = max_records or settings.MAX_RECORDS
        self.pattern = pattern

    def scan(self, raw_text: str) -> Iterator[ScanStep]:
        """
        Yield one step per candidate row. A step whose record is None was
        rejected. The scan ends when nothing else matches or the text runs out;
        callers stop early by no longer pulling from the iterator.
        """
        cursor = 0
        length = len(raw_text)
        while cursor < length:
            match = self.pattern.search(raw_text, cursor)
            if match is None:
                return
            # always move forward, even on an empty match
            next_cursor = max(match.end(), cursor + 1)

            fields = [match.group(name) for name in FIELD_GROUPS]
            record = None
            if all(value and value.strip() for value in fields):
                record = build_record(*fields, origin=self.origin)

            yield ScanStep(start=cursor, end=next_cursor, record=record)
            cursor = next_cursor

    def extract(self, raw_text: str) -> List[AnnouncementRecord]:
        records: List[AnnouncementRecord] = []
        rejected = 0
        if raw_text:
            for step in self.scan(raw_text):
                if step.record is None:
                    rejected += 1
                    continue
                records.append(step.record)
                if len(records) >= self.max_records:
                    break

        if rejected:
            logger.debug("Skipped %d incomplete announcement rows", rejected)
        if not records:
            raise ParseError("No announcement rows found in the listing page")
        return records
