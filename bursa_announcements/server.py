"""
Process entry point: claim a listening port, then serve the app with uvicorn.

The base port is tried first; while the OS reports it in use the next port up
is tried, up to PORT_RETRIES ports in total. Running out of ports is fatal.
"""

import errno
import logging
import socket
import sys
from typing import Optional

import uvicorn

from bursa_announcements.core.config import settings
from bursa_announcements.core.request_log import RequestLog
from bursa_announcements.main import create_app

logger = logging.getLogger(__name__)


class BindError(Exception):
    """No listening port could be bound at startup."""


def bind_with_fallback(
    host: str,
    base_port: int,
    retries: int,
    request_log: Optional[RequestLog] = None,
) -> socket.socket:
    """Return a listening socket on the first free port in [base_port, base_port + retries)."""
    if retries < 1:
        raise BindError("PORT_RETRIES must be at least 1")

    last_error: Optional[OSError] = None
    for port in range(base_port, base_port + retries):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.bind((host, port))
            sock.listen(socket.SOMAXCONN)
        except OSError as e:
            sock.close()
            if e.errno != errno.EADDRINUSE:
                raise BindError(f"Cannot bind {host}:{port}: {e}") from e
            logger.info("Port %d in use, trying %d", port, port + 1)
            last_error = e
            continue

        if request_log is not None:
            request_log.event("INFO", f"START http://{host}:{port}")
        return sock

    raise BindError(
        f"No free port in {base_port}-{base_port + retries - 1} on {host}: {last_error}"
    )


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    request_log = RequestLog(settings.LOG_PATH)

    try:
        app = create_app(request_log=request_log)
    except ValueError as e:
        request_log.event("FATAL", f"CONFIG {e}")
        print(f"FATAL: invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        sock = bind_with_fallback(settings.HOST, settings.BASE_PORT, settings.PORT_RETRIES, request_log)
    except BindError as e:
        request_log.event("FATAL", f"BIND {e}")
        print(f"FATAL: HTTP server failed to start: {e}", file=sys.stderr)
        sys.exit(1)

    config = uvicorn.Config(app, log_level=settings.LOG_LEVEL.lower(), access_log=False)
    uvicorn.Server(config).run(sockets=[sock])


if __name__ == "__main__":
    main()
