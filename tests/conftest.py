from typing import Callable, Dict, List, Optional

import httpx
import pytest

from skywatch.weather.client import ObservationFeedClient, OpenMeteoClient
from skywatch.weather.service import ObservationService

FEED_HOST = "feed.test"
FORECAST_HOST = "forecast.test"


def _station_xml(
    name: Optional[str] = "Tallinn-Harku",
    latitude: Optional[str] = "59.4",
    longitude: Optional[str] = "24.7",
    cloudiness: Optional[str] = None,
    phenomenon: Optional[str] = None,
) -> str:
    parts = ["<station>"]
    for tag, value in (
        ("name", name),
        ("latitude", latitude),
        ("longitude", longitude),
        ("cloudiness", cloudiness),
        ("phenomenon", phenomenon),
    ):
        if value is not None:
            parts.append(f"<{tag}>{value}</{tag}>")
    parts.append("</station>")
    return "".join(parts)


def _feed_xml(*stations: str, timestamp: Optional[str] = "1700000000") -> bytes:
    attribute = f' timestamp="{timestamp}"' if timestamp is not None else ""
    body = "".join(stations)
    return f'<?xml version="1.0" encoding="UTF-8"?><observations{attribute}>{body}</observations>'.encode()


@pytest.fixture
def station_xml() -> Callable[..., str]:
    return _station_xml


@pytest.fixture
def feed_xml() -> Callable[..., bytes]:
    return _feed_xml


class FakeUpstreams:
    """Routes httpx requests to canned feed and forecast responses and records them."""

    def __init__(self):
        self.feed_response: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, content=_feed_xml())
        )
        self.forecast_response: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"current": {"time": "2023-11-15T00:15", "cloud_cover": 37}})
        )
        self.requests: Dict[str, List[httpx.Request]] = {FEED_HOST: [], FORECAST_HOST: []}

    def serve_feed(self, document: bytes, status_code: int = 200):
        self.feed_response = lambda request: httpx.Response(status_code, content=document)

    def serve_forecast(self, payload=None, status_code: int = 200):
        self.forecast_response = lambda request: httpx.Response(status_code, json=payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests[request.url.host].append(request)
        if request.url.host == FEED_HOST:
            return self.feed_response(request)
        return self.forecast_response(request)

    @property
    def feed_requests(self) -> List[httpx.Request]:
        return self.requests[FEED_HOST]

    @property
    def forecast_requests(self) -> List[httpx.Request]:
        return self.requests[FORECAST_HOST]

    def service(self, **kwargs) -> ObservationService:
        transport = httpx.MockTransport(self.handler)
        return ObservationService(
            feed_client=ObservationFeedClient(base_url=f"https://{FEED_HOST}/observations.php", transport=transport),
            forecast_client=OpenMeteoClient(base_url=f"https://{FORECAST_HOST}/v1/forecast", transport=transport),
            **kwargs,
        )


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()
