import pytest

from skywatch.weather.errors import FeedParseError
from skywatch.weather.observations import (
    FieldState, ObservationFeed, parse_number, parse_observation_feed
)


@pytest.mark.parametrize("text", [None, "", "   "])
def test_parse_number_absent(text) -> None:
    assert parse_number(text).state is FieldState.ABSENT


@pytest.mark.parametrize("text", ["abc", "4 octas", "nan", "inf", "-Infinity"])
def test_parse_number_unparseable(text) -> None:
    parsed = parse_number(text)
    assert parsed.state is FieldState.UNPARSEABLE
    assert parsed.value is None
    assert parsed.raw == text.strip()


def test_parse_number_valid_strips_whitespace() -> None:
    parsed = parse_number(" 59.4 ")
    assert parsed.is_valid
    assert parsed.value == 59.4
    assert parsed.as_number() == 59.4
    assert parse_number("4").as_number() == 4
    assert isinstance(parse_number("4").as_number(), int)


def test_single_station_and_station_list_parse_the_same_way(feed_xml, station_xml) -> None:
    single = parse_observation_feed(feed_xml(station_xml(cloudiness="4")))
    several = parse_observation_feed(
        feed_xml(station_xml(cloudiness="4"), station_xml(name="Tartu", latitude="58.3", longitude="26.7"))
    )

    assert len(single.stations) == 1
    assert len(several.stations) == 2
    assert single.stations[0] == several.stations[0]
    assert several.stations[1].name == "Tartu"


def test_station_fields_are_populated(feed_xml, station_xml) -> None:
    feed = parse_observation_feed(feed_xml(station_xml(cloudiness="6", phenomenon=" Overcast ")))
    station = feed.stations[0]

    assert station.name == "Tallinn-Harku"
    assert station.coordinates == (59.4, 24.7)
    assert station.cloudiness.value == 6
    assert station.phenomenon == "Overcast"


def test_malformed_station_does_not_fail_the_feed(feed_xml, station_xml) -> None:
    feed = parse_observation_feed(
        feed_xml(
            station_xml(name="Broken", latitude="n/a"),
            station_xml(name="NoLon", longitude=None),
            station_xml(name="Good"),
        )
    )

    assert [s.name for s in feed.stations] == ["Broken", "NoLon", "Good"]
    assert feed.stations[0].coordinates is None
    assert feed.stations[0].latitude.state is FieldState.UNPARSEABLE
    assert feed.stations[1].coordinates is None
    assert feed.stations[1].longitude.state is FieldState.ABSENT
    assert feed.stations[2].coordinates == (59.4, 24.7)


def test_blank_elements_are_absent_not_zero(feed_xml, station_xml) -> None:
    feed = parse_observation_feed(feed_xml(station_xml(cloudiness="", phenomenon="")))
    station = feed.stations[0]

    assert station.cloudiness.state is FieldState.ABSENT
    assert station.cloudiness.as_number() is None
    assert station.phenomenon is None


def test_feed_timestamp_as_iso_utc(feed_xml) -> None:
    feed = parse_observation_feed(feed_xml(timestamp="1700000000"))
    assert feed.observed_at == "2023-11-14T22:13:20.000Z"


def test_feed_timestamp_from_child_element() -> None:
    feed = parse_observation_feed(b"<observations><timestamp>1700000000</timestamp></observations>")
    assert feed.observed_at == "2023-11-14T22:13:20.000Z"


def test_missing_or_bad_timestamp_gives_no_time(feed_xml) -> None:
    assert parse_observation_feed(feed_xml(timestamp=None)).observed_at is None
    assert parse_observation_feed(feed_xml(timestamp="soon")).observed_at is None
    assert ObservationFeed().observed_at is None


def test_empty_feed_has_no_stations(feed_xml) -> None:
    feed = parse_observation_feed(feed_xml())
    assert feed.stations == []


def test_not_xml_raises_feed_parse_error() -> None:
    with pytest.raises(FeedParseError):
        parse_observation_feed(b"<html><body>Service down")


def test_unknown_encoding_raises_feed_parse_error() -> None:
    with pytest.raises(FeedParseError):
        parse_observation_feed(b'<?xml version="1.0" encoding="bogus"?><observations/>')


def test_unexpected_root_raises_feed_parse_error() -> None:
    with pytest.raises(FeedParseError, match="root element <html>"):
        parse_observation_feed(b"<html><station/></html>")
