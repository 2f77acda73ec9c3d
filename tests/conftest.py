import httpx
import pytest

from webcontents import WebcontentsApiClient, set_logging_level

API_URL = "https://cms.example.com"
API_KEY = "secret-key"

OPERATIONS = [
    ("fetch_content", "/api/webcontents/fetchContent"),
    ("fetch_events", "/api/webcontents/fetchEvents"),
    ("fetch_media_gallery", "/api/webcontents/fetchMediaGallery"),
    ("fetch_system_data", "/api/webcontents/fetchSystemData"),
    ("fetch_website_menu", "/api/webcontents/fetchWebsiteMenu"),
]


class RecordingServer:
    """Answers every request with a fixed response and remembers the requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.respond = lambda request: httpx.Response(200, json={"status": True})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def server():
    return RecordingServer()


@pytest.fixture
def client(server):
    return WebcontentsApiClient(
        API_URL, API_KEY, transport=httpx.MockTransport(server)
    )


@pytest.fixture
def log_messages():
    messages = []
    set_logging_level("TRACE", sink=messages.append)
    yield messages
    set_logging_level("WARNING")
