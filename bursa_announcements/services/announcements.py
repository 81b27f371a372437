import logging
from dataclasses import dataclass, field
from typing import List, Optional

from bursa_announcements.extract.base import ParseError
from bursa_announcements.fetch.base import BaseFetcher, FetchError
from bursa_announcements.schemas import AnnouncementRecord

from .sources import AnnouncementSource, source_from_settings

logger = logging.getLogger(__name__)


@dataclass
class ServiceResponse:
    ok: bool
    records: List[AnnouncementRecord] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def Ok(cls, records: List[AnnouncementRecord]) -> "ServiceResponse":
        return cls(ok=True, records=records)

    @classmethod
    def Err(cls, reason: str) -> "ServiceResponse":
        return cls(ok=False, error=reason)


class AnnouncementService:
    """
    Fetch + extract on every call. Nothing is cached between calls and the
    returned records belong to the caller.
    """

    def __init__(self, fetcher: BaseFetcher, source: Optional[AnnouncementSource] = None):
        self.fetcher = fetcher
        self.source = source or source_from_settings()

    def get_announcements(self) -> ServiceResponse:
        try:
            records = self.source.collect(self.fetcher)
        except FetchError as e:
            logger.error("Announcement fetch failed: %s", e.detail)
            return ServiceResponse.Err(f"Could not retrieve announcements: {e.detail}")
        except ParseError as e:
            logger.error("Announcement extraction failed: %s", e)
            return ServiceResponse.Err(f"Could not read announcements: {e}")

        logger.info("Extracted %d announcements", len(records))
        return ServiceResponse.Ok(records)
