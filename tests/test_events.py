"""Tests for player event types."""

from __future__ import annotations

import pytest

from playerhook.events import (
    AudioItem,
    CoverImage,
    Playing,
    RepeatChanged,
    SessionConnected,
    TrackChanged,
    TrackId,
    VolumeChanged,
    event_from_dict,
)


class TestTrackId:
    """Base62 track identifiers."""

    def test_zero_is_padded(self):
        assert TrackId(0).to_base62() == "0" * 22

    def test_small_values(self):
        assert TrackId(61).to_base62() == "0" * 21 + "Z"
        assert TrackId(62).to_base62() == "0" * 20 + "10"

    def test_parse(self):
        assert TrackId.from_base62("0" * 20 + "1a").raw == 62 + 10

    def test_largest_id(self):
        track_id = TrackId((1 << 128) - 1)
        assert TrackId.from_base62(track_id.to_base62()) == track_id

    @pytest.mark.parametrize("raw", [-1, 1 << 128])
    def test_no_base62_form(self, raw):
        assert TrackId(raw).to_base62() is None

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "abc",
            "4uLU6hMCjMI75M1A2tKUQC0",
            "4uLU6hMCjMI75M1A2tKUQ-",
            "ZZZZZZZZZZZZZZZZZZZZZZ",
        ],
    )
    def test_invalid_text(self, text):
        with pytest.raises(ValueError):
            TrackId.from_base62(text)


class TestEventFromDict:
    """Decoding events from JSON-style mappings."""

    def test_playing(self):
        event = event_from_dict(
            {
                "event": "Playing",
                "track_id": "4uLU6hMCjMI75M1A2tKUQC",
                "play_request_id": 3,
                "position_ms": "1200",
            }
        )
        assert event == Playing(TrackId.from_base62("4uLU6hMCjMI75M1A2tKUQC"), 3, 1200)

    def test_track_changed(self):
        event = event_from_dict(
            {
                "event": "TrackChanged",
                "audio_item": {
                    "track_id": "4uLU6hMCjMI75M1A2tKUQC",
                    "name": "Song",
                    "duration_ms": 1000,
                    "covers": [{"url": "https://img/1", "width": 64, "height": 64}],
                },
            }
        )
        assert event == TrackChanged(
            AudioItem(
                TrackId.from_base62("4uLU6hMCjMI75M1A2tKUQC"),
                "Song",
                1000,
                (CoverImage("https://img/1", 64, 64),),
            )
        )

    def test_track_changed_without_covers(self):
        event = event_from_dict(
            {
                "event": "TrackChanged",
                "audio_item": {"track_id": "0" * 22, "name": "Song", "duration_ms": 1},
            }
        )
        assert isinstance(event, TrackChanged)
        assert event.audio_item.covers == ()

    def test_strings_and_booleans(self):
        assert event_from_dict(
            {"event": "SessionConnected", "connection_id": "c", "user_name": "u"}
        ) == SessionConnected("c", "u")
        assert event_from_dict({"event": "RepeatChanged", "repeat": False}) == RepeatChanged(False)

    def test_extra_fields_ignored(self):
        assert event_from_dict({"event": "VolumeChanged", "volume": 5, "x": 1}) == VolumeChanged(5)

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"event": "Rewound"},
            {"event": 3},
            {"event": "VolumeChanged"},
            {"event": "VolumeChanged", "volume": "loud"},
            {"event": "VolumeChanged", "volume": None},
            {"event": "ShuffleChanged", "shuffle": "yes"},
            {"event": "Stopped", "track_id": "nope", "play_request_id": 1},
            {"event": "TrackChanged", "audio_item": {"name": "Song"}},
            {"event": "TrackChanged", "audio_item": [1]},
            {"event": "TrackChanged", "audio_item": "Song"},
            {"event": "TrackChanged", "audio_item": {"name": "Song", "covers": "https://img/1"}},
            {"event": "TrackChanged", "audio_item": {"name": "Song", "covers": ["https://img/1"]}},
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(ValueError):
            event_from_dict(data)
