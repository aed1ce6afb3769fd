from datetime import datetime, timedelta, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from iso15118_json.messages.datatypes import (
    Duration,
    PercentValue,
    Timestamp,
    base64_binary,
)
from iso15118_json.messages.iso15118_20.common_messages import PowerScheduleEntry
from iso15118_json.messages.iso15118_20.common_types import RationalNumber

duration_adapter = TypeAdapter(Duration)
timestamp_adapter = TypeAdapter(Timestamp)
percent_adapter = TypeAdapter(PercentValue)
challenge_adapter = TypeAdapter(base64_binary(min_length=16, max_length=16))


@pytest.mark.parametrize("seconds", [0, 1, 3600, 86400, 2**32 - 1])
def test_duration_round_trip(seconds):
    duration = duration_adapter.validate_python(seconds)

    assert duration == timedelta(seconds=seconds)
    assert duration_adapter.dump_python(duration, mode="json") == seconds


def test_duration_is_rounded_to_whole_seconds():
    assert duration_adapter.dump_python(timedelta(milliseconds=1500), mode="json") == 2
    assert duration_adapter.dump_python(timedelta(milliseconds=1400), mode="json") == 1


@pytest.mark.parametrize("value", [-1, 2**32, 1.5, "60", True, None])
def test_invalid_durations(value):
    with pytest.raises(ValidationError):
        duration_adapter.validate_python(value)


def test_negative_timedelta_is_rejected():
    with pytest.raises(ValidationError):
        duration_adapter.validate_python(timedelta(seconds=-5))


def test_timedelta_is_kept_in_whole_seconds():
    duration = duration_adapter.validate_python(timedelta(seconds=1.4))

    assert duration == timedelta(seconds=1)
    encoded = duration_adapter.dump_python(duration, mode="json")
    assert duration_adapter.validate_python(encoded) == duration


def test_timedelta_beyond_unsigned_int_is_rejected():
    with pytest.raises(ValidationError):
        duration_adapter.validate_python(timedelta(seconds=2**32))


def test_message_with_sub_second_duration_survives_round_trip():
    entry = PowerScheduleEntry(
        duration=timedelta(seconds=1.4), power=RationalNumber(exponent=0, value=10)
    )

    assert PowerScheduleEntry.parse(entry.to_json()) == entry


def test_timestamp_round_trip():
    timestamp = timestamp_adapter.validate_python("2022-07-28T16:19:54+02:00")

    assert timestamp == datetime(2022, 7, 28, 14, 19, 54, tzinfo=timezone.utc)
    encoded = timestamp_adapter.dump_python(timestamp, mode="json")
    assert timestamp_adapter.validate_python(encoded) == timestamp


def test_naive_timestamp_is_rejected():
    with pytest.raises(ValidationError):
        timestamp_adapter.validate_python("2022-07-28T16:19:54")


@pytest.mark.parametrize("value, valid", [(0, True), (100, True), (101, False), (-1, False)])
def test_percent_value(value, valid):
    if valid:
        assert percent_adapter.validate_python(value) == value
    else:
        with pytest.raises(ValidationError):
            percent_adapter.validate_python(value)


def test_base64_binary():
    challenge = challenge_adapter.validate_python("AAECAwQFBgcICQoLDA0ODw==")

    assert challenge == bytes(range(16))
    assert challenge_adapter.dump_python(challenge, mode="json") == (
        "AAECAwQFBgcICQoLDA0ODw=="
    )
    # Python mode keeps the raw bytes
    assert challenge_adapter.dump_python(challenge) == bytes(range(16))


@pytest.mark.parametrize("value", ["AAEC", "not base64!", "AAECAwQFBgcICQoLDA0ODw"])
def test_invalid_base64_binary(value):
    with pytest.raises(ValidationError):
        challenge_adapter.validate_python(value)
