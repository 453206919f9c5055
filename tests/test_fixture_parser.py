import logging

import pytest

from conftest import make_fixture
from core.exceptions import RecordParseError
from integrations.fixture_parser import (
    extract_match_day,
    parse_fixture,
    parse_fixtures,
    parse_kickoff,
)


def test_parse_finished_fixture():
    record = parse_fixture(make_fixture(goals=(3, 1), fixture_id=42))

    assert record.home_team == "Arsenal"
    assert record.away_team == "Chelsea"
    assert record.kickoff == "2024-08-17T14:00:00Z"
    assert record.match_day == 1
    assert record.result == "3:1"
    assert record.is_finished
    assert record.fixture_id == 42


@pytest.mark.parametrize("goals", [(None, None), (2, None), (None, 0)])
def test_missing_fulltime_score_is_unplayed(goals):
    record = parse_fixture(make_fixture(goals=goals))
    assert record.result == "0:0"
    assert not record.is_finished


def test_missing_score_block_is_unplayed():
    raw = make_fixture()
    del raw["score"]
    assert parse_fixture(raw).result == "0:0"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-08-17T14:00:00+00:00", "2024-08-17T14:00:00Z"),
        ("2024-08-17T14:00:00Z", "2024-08-17T14:00:00Z"),
        ("2024-08-17T16:00:00+02:00", "2024-08-17T16:00:00+02:00"),
        ("2024-08-17T14:00:00.000+00:00", "2024-08-17T14:00:00Z"),
        ("2024-08-17T14:00:00.123456789Z", "2024-08-17T14:00:00Z"),
        ("2024-08-17T16:00:00.5+02:00", "2024-08-17T16:00:00+02:00"),
    ],
)
def test_kickoff_normalisation(value, expected):
    assert parse_kickoff(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        "17/08/2024 14:00",
        "2024-08-17",
        "",
        "2024-08-17T14:00:00",
        "2024-08-17T14:00:00+0000",
        "2024-08-17T14:00:00.+00:00",
        "2024-02-30T14:00:00Z",
    ],
)
def test_unparseable_kickoff_raises(value):
    with pytest.raises(RecordParseError):
        parse_kickoff(value)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("Regular Season - 12", 12),
        ("Matchday 7", 7),
        ("Quarter-finals", 0),
        ("", 0),
        (None, 0),
    ],
)
def test_extract_match_day(label, expected):
    assert extract_match_day(label) == expected


def test_bad_record_dropped_rest_kept(caplog):
    items = [
        make_fixture("A", "B", fixture_id=1),
        make_fixture("C", "D", date="not-a-date", fixture_id=2),
        {"fixture": {"id": 3, "date": "2024-08-17T14:00:00+00:00"}},  # no teams
        "garbage",
        make_fixture("E", "F", fixture_id=4),
    ]

    with caplog.at_level(logging.WARNING, logger="integrations.fixture_parser"):
        records = parse_fixtures(items)

    assert [r.fixture_id for r in records] == [1, 4]
    assert sum("Dropping fixture" in m for m in caplog.messages) == 3


def test_parse_error_carries_fixture_id():
    with pytest.raises(RecordParseError) as excinfo:
        parse_fixture(make_fixture(date="yesterday", fixture_id=99))
    assert excinfo.value.fixture_id == 99


def test_fractional_second_kickoff_kept():
    records = parse_fixtures([make_fixture(date="2024-08-17T14:00:00.000+00:00")])

    assert len(records) == 1
    assert records[0].kickoff == "2024-08-17T14:00:00Z"


def test_null_team_name_is_dropped():
    raw = make_fixture()
    raw["teams"]["away"]["name"] = None

    assert parse_fixtures([raw]) == []
