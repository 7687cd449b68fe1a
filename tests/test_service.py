import asyncio

import httpx
import pytest

from skywatch.weather.errors import FeedParseError, UpstreamUnavailable
from skywatch.weather.models import Coordinate
from skywatch.weather.service import NOTE_FALLBACK_UNAVAILABLE, NOTE_NO_STATIONS

TALLINN = Coordinate(lat=59.43, lon=24.75)


def _resolve(service, coordinate=TALLINN):
    async def run():
        async with service:
            return await service.get_cloud_observation(coordinate)

    return asyncio.run(run())


def test_cloudiness_scale_reading(upstreams, feed_xml, station_xml) -> None:
    upstreams.serve_feed(feed_xml(station_xml(cloudiness="4", phenomenon="Overcast")))

    result = _resolve(upstreams.service())

    assert result.cloud_cover_percent == 50
    assert "cloudiness-scale" in result.source
    assert result.source.startswith("Ilmateenistus")
    assert result.station.name == "Tallinn-Harku"
    assert result.station.latitude == 59.4
    assert result.station.longitude == 24.7
    assert result.station.distance_km == 4.4
    assert result.phenomenon == "Overcast"
    assert result.cloudiness_ball == 4
    assert result.time == "2023-11-14T22:13:20.000Z"
    assert result.request == TALLINN
    assert result.note is None
    assert upstreams.forecast_requests == []


def test_phenomenon_label_reading(upstreams, feed_xml, station_xml) -> None:
    upstreams.serve_feed(feed_xml(station_xml(phenomenon="Overcast")))

    result = _resolve(upstreams.service())

    assert result.cloud_cover_percent == 100
    assert "phenomenon-label" in result.source
    assert result.cloudiness_ball is None
    assert upstreams.forecast_requests == []


def test_fallback_reading_when_station_is_inconclusive(upstreams, feed_xml, station_xml) -> None:
    upstreams.serve_feed(feed_xml(station_xml(phenomenon="Light rain")))
    upstreams.serve_forecast({"current": {"time": "2023-11-15T00:15", "cloud_cover": 37}})

    result = _resolve(upstreams.service())

    assert result.cloud_cover_percent == 37
    assert "fallback" in result.source
    assert result.time == "2023-11-15T00:15"
    assert result.station.name == "Tallinn-Harku"
    assert result.phenomenon == "Light rain"

    [request] = upstreams.forecast_requests
    assert request.url.params["latitude"] == "59.43"
    assert request.url.params["longitude"] == "24.75"
    assert request.url.params["current"] == "cloud_cover"


def test_out_of_range_cloudiness_is_echoed_and_falls_back(upstreams, feed_xml, station_xml) -> None:
    upstreams.serve_feed(feed_xml(station_xml(cloudiness="9")))

    result = _resolve(upstreams.service())

    assert result.cloudiness_ball == 9
    assert result.cloud_cover_percent == 37
    assert "fallback" in result.source


def test_fallback_provider_failure_gives_null_reading(upstreams, feed_xml, station_xml) -> None:
    upstreams.serve_feed(feed_xml(station_xml()))
    upstreams.serve_forecast({"reason": "down"}, status_code=503)

    result = _resolve(upstreams.service())

    assert result.cloud_cover_percent is None
    assert result.source == "Ilmateenistus (Keskkonnaagentuur)"
    assert result.note == NOTE_FALLBACK_UNAVAILABLE
    assert result.station is not None
    assert result.time == "2023-11-14T22:13:20.000Z"


def test_fallback_without_numeric_value_gives_null_reading(upstreams, feed_xml, station_xml) -> None:
    upstreams.serve_feed(feed_xml(station_xml()))
    upstreams.serve_forecast({"current": {"time": "2023-11-15T00:15", "cloud_cover": None}})

    result = _resolve(upstreams.service())

    assert result.cloud_cover_percent is None
    assert "fallback" not in result.source


def test_fallback_transport_error_gives_null_reading(upstreams, feed_xml, station_xml) -> None:
    upstreams.serve_feed(feed_xml(station_xml()))

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstreams.forecast_response = refuse

    result = _resolve(upstreams.service())

    assert result.cloud_cover_percent is None
    assert result.note == NOTE_FALLBACK_UNAVAILABLE


def test_no_usable_station_skips_fallback_by_default(upstreams, feed_xml, station_xml) -> None:
    upstreams.serve_feed(feed_xml(station_xml(latitude="?"), station_xml(longitude="")))

    result = _resolve(upstreams.service())

    assert result.station is None
    assert result.cloud_cover_percent is None
    assert result.note == NOTE_NO_STATIONS
    assert result.phenomenon is None
    assert result.cloudiness_ball is None
    assert upstreams.forecast_requests == []


def test_empty_feed_skips_fallback_by_default(upstreams, feed_xml) -> None:
    upstreams.serve_feed(feed_xml())

    result = _resolve(upstreams.service())

    assert result.station is None
    assert result.cloud_cover_percent is None
    assert upstreams.forecast_requests == []


def test_no_usable_station_uses_fallback_when_enabled(upstreams, feed_xml) -> None:
    upstreams.serve_feed(feed_xml())

    result = _resolve(upstreams.service(fallback_on_no_station=True))

    assert result.station is None
    assert result.cloud_cover_percent == 37
    assert "fallback" in result.source
    assert result.note == NOTE_NO_STATIONS
    assert len(upstreams.forecast_requests) == 1


def test_feed_http_error_is_fatal(upstreams) -> None:
    upstreams.serve_feed(b"busy", status_code=503)

    with pytest.raises(UpstreamUnavailable, match="503"):
        _resolve(upstreams.service())
    assert upstreams.forecast_requests == []


def test_feed_timeout_is_upstream_unavailable(upstreams) -> None:
    def stall(request):
        raise httpx.ReadTimeout("timed out", request=request)

    upstreams.feed_response = stall

    with pytest.raises(UpstreamUnavailable, match="timed out"):
        _resolve(upstreams.service())


def test_unrecognizable_feed_is_fatal(upstreams) -> None:
    upstreams.serve_feed(b"<html>maintenance</html>")

    with pytest.raises(FeedParseError):
        _resolve(upstreams.service())
    assert len(upstreams.feed_requests) == 1
    assert upstreams.forecast_requests == []
