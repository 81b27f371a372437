import io
import os
import pytest
import httpx
from bursa_announcements.core import config
from bursa_announcements.core.request_log import RequestLog

ORIGIN = "https://www.bursamalaysia.com"

@pytest.fixture(autouse=True)
def setup_test_environment(tmp_path):
    """Point settings at throwaway paths and a fast fetch policy"""
    # Store original values
    original = {
        "LOG_PATH": config.settings.LOG_PATH,
        "SITE_ORIGIN": config.settings.SITE_ORIGIN,
        "SOURCE_STRATEGY": config.settings.SOURCE_STRATEGY,
        "BACKOFF_BASE_SECONDS": config.settings.BACKOFF_BASE_SECONDS,
    }

    config.settings.LOG_PATH = str(tmp_path / "logs" / "server.log")
    config.settings.SITE_ORIGIN = ORIGIN
    config.settings.SOURCE_STRATEGY = "markup"
    config.settings.BACKOFF_BASE_SECONDS = 0.0

    yield

    # Restore original values
    for name, value in original.items():
        setattr(config.settings, name, value)

@pytest.fixture
def console():
    return io.StringIO()

@pytest.fixture
def request_log(tmp_path, console):
    """Request log writing to a temp file and an in-memory console"""
    return RequestLog(str(tmp_path / "logs" / "requests.log"), stream=console)

@pytest.fixture
def log_lines(request_log):
    """Read back what has been written to the request log file so far"""
    def read():
        if not os.path.exists(request_log.path):
            return []
        with open(request_log.path, encoding="utf-8") as f:
            return [line.rstrip("\n") for line in f]
    return read

@pytest.fixture
def sleeps():
    """Records backoff delays instead of sleeping"""
    return []

@pytest.fixture
def mock_client():
    """Build an httpx.Client whose requests are answered by `handler`"""
    clients = []

    def make(handler):
        client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
        clients.append(client)
        return client

    yield make

    for client in clients:
        client.close()

@pytest.fixture
def listing_row():
    """Render one row of the announcements listing table"""
    def render(
        date="06 Oct 2025",
        company_link="/listing/ABC",
        company="ABC Bhd",
        link="/ann/1",
        memo="Q3 Results",
    ):
        return (
            "<tr>"
            "<td class='text-center'>1</td>"
            f"<td><div class='d-lg-none'>06/10/2025</div><div class='d-lg-inline-block d-none'>{date}</div></td>"
            f"<td><a href='{company_link}' target='_blank'>{company}</a></td>"
            f"<td><a href='{link}' target='_blank'>{memo}</a></td>"
            "</tr>\n"
        )
    return render

@pytest.fixture
def listing_page(listing_row):
    """Wrap rendered rows into a minimal listing page"""
    def render(*rows):
        return (
            "<html><body><table class='table' id='table-announcements'>"
            "<thead><tr><th>No</th><th>Date</th><th>Company</th><th>Title</th></tr></thead>"
            "<tbody>\n" + "".join(rows) + "</tbody></table></body></html>"
        )
    return render
