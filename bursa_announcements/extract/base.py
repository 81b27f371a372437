from typing import List

from bursa_announcements.schemas import AnnouncementRecord


class ParseError(Exception):
    """Raised when a fetched page yields no usable announcement records."""


class BaseExtractor:
    def extract(self, raw_text: str) -> List[AnnouncementRecord]:
        raise NotImplementedError
