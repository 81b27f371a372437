from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class FailureKind(str, Enum):
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    OVERFLOW = "overflow"


class FetchError(Exception):
    """A single failed fetch attempt, or the surfaced failure of a whole retry chain."""

    kind: FailureKind = FailureKind.TRANSPORT

    def __init__(self, detail: str, kind: Optional[FailureKind] = None):
        super().__init__(detail)
        self.detail = detail
        if kind is not None:
            self.kind = kind


class TransportError(FetchError):
    kind = FailureKind.TRANSPORT


class ProtocolError(FetchError):
    kind = FailureKind.PROTOCOL

    def __init__(self, detail: str, status_code: int):
        super().__init__(detail)
        self.status_code = status_code


class BufferOverflowError(FetchError):
    kind = FailureKind.OVERFLOW


@dataclass(frozen=True)
class Timeouts:
    connect: float = 10.0
    transfer: float = 30.0


@dataclass
class FetchOutcome:
    url: str
    ok: bool
    text: Optional[str] = None
    kind: Optional[FailureKind] = None
    detail: str = ""
    status_code: Optional[int] = None
    attempts: int = 1

    @classmethod
    def success(cls, url: str, text: str, status_code: int = 200) -> "FetchOutcome":
        return cls(url=url, ok=True, text=text, status_code=status_code)

    @classmethod
    def failure(cls, url: str, error: FetchError) -> "FetchOutcome":
        return cls(
            url=url,
            ok=False,
            kind=error.kind,
            detail=error.detail,
            status_code=getattr(error, "status_code", None),
        )

    def raise_for_failure(self) -> str:
        """Return the fetched text, or raise the failure as a FetchError."""
        if not self.ok:
            raise FetchError(self.detail, kind=self.kind)
        return self.text or ""


class BaseFetcher:
    def fetch(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeouts: Optional[Timeouts] = None,
    ) -> FetchOutcome:
        raise NotImplementedError
