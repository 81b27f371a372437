import logging
import math
import time
from typing import List, Optional
from urllib.parse import urlencode

from bursa_announcements.core.config import settings
from bursa_announcements.extract.api_rows import ApiRowsExtractor, parse_page, records_total
from bursa_announcements.extract.base import BaseExtractor, ParseError
from bursa_announcements.extract.markup import MarkupExtractor
from bursa_announcements.fetch.base import BaseFetcher, FetchError
from bursa_announcements.schemas import AnnouncementRecord

logger = logging.getLogger(__name__)


class AnnouncementSource:
    """One way of acquiring announcements: what to fetch and how to read it."""

    def collect(self, fetcher: BaseFetcher) -> List[AnnouncementRecord]:
        raise NotImplementedError


class MarkupSource(AnnouncementSource):
    """Fetch the public listing page once and scrape its rows."""

    def __init__(self, url: Optional[str] = None, extractor: Optional[BaseExtractor] = None):
        self.url = url or settings.ANNOUNCEMENTS_URL
        self.extractor = extractor or MarkupExtractor()

    def collect(self, fetcher: BaseFetcher) -> List[AnnouncementRecord]:
        outcome = fetcher.fetch(self.url)
        raw_text = outcome.raise_for_failure()
        return self.extractor.extract(raw_text)


class ApiSource(AnnouncementSource):
    """
    Page through the JSON search API.

    Page 1 decides the total and must succeed; later pages that fail are
    skipped so one bad page does not discard everything already collected.
    """

    def __init__(
        self,
        search_url: Optional[str] = None,
        per_page: Optional[int] = None,
        max_pages: Optional[int] = None,
        extractor: Optional[ApiRowsExtractor] = None,
    ):
        self.search_url = search_url or settings.API_SEARCH_URL
        self.per_page = per_page or settings.API_PER_PAGE
        self.max_pages = max_pages or settings.API_MAX_PAGES
        self.extractor = extractor or ApiRowsExtractor(max_records=self.per_page)

    def page_url(self, page: int) -> str:
        query = urlencode({
            "ann_type": "company",
            "per_page": self.per_page,
            "page": page,
            "_": int(time.time()),  # cache buster
        })
        return f"{self.search_url}?{query}"

    def page_count(self, total: int) -> int:
        return min(math.ceil(total / self.per_page), self.max_pages)

    def collect(self, fetcher: BaseFetcher) -> List[AnnouncementRecord]:
        first = parse_page(fetcher.fetch(self.page_url(1)).raise_for_failure())
        total = records_total(first)
        pages = self.page_count(total)
        logger.info("Search API reports %d announcements over %d page(s)", total, pages)

        records = self.extractor.rows_to_records(first["data"])
        for page in range(2, pages + 1):
            try:
                raw_text = fetcher.fetch(self.page_url(page)).raise_for_failure()
                records.extend(self.extractor.rows_to_records(parse_page(raw_text)["data"]))
            except (FetchError, ParseError) as e:
                logger.warning("Search API page %d skipped: %s", page, e)
                continue
            logger.debug("Collected %d/%d announcements", len(records), total)

        if not records:
            raise ParseError("Search API returned no usable announcements")
        return records


def source_from_settings() -> AnnouncementSource:
    if settings.SOURCE_STRATEGY == "api":
        return ApiSource()
    if settings.SOURCE_STRATEGY != "markup":
        raise ValueError(f"Unknown SOURCE_STRATEGY {settings.SOURCE_STRATEGY!r} (expected 'markup' or 'api')")
    return MarkupSource()
