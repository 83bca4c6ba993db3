"""Player event types emitted by the playback engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, Union, get_args

BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE62_LENGTH = 22
_ID_BITS = 128


@dataclass(frozen=True)
class TrackId:
    """A 128-bit track identifier."""

    raw: int

    @classmethod
    def from_base62(cls, text: str) -> TrackId:
        """Parse a 22-character base62 identifier.

        Raises:
            ValueError: If the text is not a valid base62 track id.
        """
        if len(text) != BASE62_LENGTH:
            raise ValueError(f"Track id must be {BASE62_LENGTH} characters: {text!r}")
        raw = 0
        for char in text:
            digit = BASE62_ALPHABET.find(char)
            if digit < 0:
                raise ValueError(f"Invalid base62 character {char!r} in {text!r}")
            raw = raw * 62 + digit
        if raw >> _ID_BITS:
            raise ValueError(f"Track id out of range: {text!r}")
        return cls(raw)

    def to_base62(self) -> str | None:
        """Return the zero-padded base62 form, or None if the id has none."""
        if self.raw < 0 or self.raw >> _ID_BITS:
            return None
        digits = []
        value = self.raw
        for _ in range(BASE62_LENGTH):
            value, digit = divmod(value, 62)
            digits.append(BASE62_ALPHABET[digit])
        return "".join(reversed(digits))


@dataclass(frozen=True)
class CoverImage:
    """Cover art for an audio item."""

    url: str
    width: int
    height: int


@dataclass(frozen=True)
class AudioItem:
    """Metadata for the item being played."""

    track_id: TrackId
    name: str
    duration_ms: int
    covers: tuple[CoverImage, ...] = ()


@dataclass(frozen=True)
class PlayRequestIdChanged:
    play_request_id: int


@dataclass(frozen=True)
class Stopped:
    track_id: TrackId
    play_request_id: int


@dataclass(frozen=True)
class Loading:
    track_id: TrackId
    play_request_id: int
    position_ms: int


@dataclass(frozen=True)
class Preloading:
    track_id: TrackId


@dataclass(frozen=True)
class Playing:
    track_id: TrackId
    play_request_id: int
    position_ms: int


@dataclass(frozen=True)
class Paused:
    track_id: TrackId
    play_request_id: int
    position_ms: int


@dataclass(frozen=True)
class TimeToPreloadNextTrack:
    track_id: TrackId
    play_request_id: int


@dataclass(frozen=True)
class EndOfTrack:
    track_id: TrackId
    play_request_id: int


@dataclass(frozen=True)
class Unavailable:
    track_id: TrackId
    play_request_id: int


@dataclass(frozen=True)
class VolumeChanged:
    volume: int


@dataclass(frozen=True)
class PositionCorrection:
    track_id: TrackId
    play_request_id: int
    position_ms: int


@dataclass(frozen=True)
class Seeked:
    track_id: TrackId
    play_request_id: int
    position_ms: int


@dataclass(frozen=True)
class TrackChanged:
    audio_item: AudioItem


@dataclass(frozen=True)
class SessionConnected:
    connection_id: str
    user_name: str


@dataclass(frozen=True)
class SessionDisconnected:
    connection_id: str
    user_name: str


@dataclass(frozen=True)
class SessionClientChanged:
    client_id: str
    client_name: str
    client_brand_name: str
    client_model_name: str


@dataclass(frozen=True)
class ShuffleChanged:
    shuffle: bool


@dataclass(frozen=True)
class RepeatChanged:
    repeat: bool


@dataclass(frozen=True)
class AutoPlayChanged:
    auto_play: bool


@dataclass(frozen=True)
class FilterExplicitContentChanged:
    filter: bool


PlayerEvent = Union[
    PlayRequestIdChanged,
    Stopped,
    Loading,
    Preloading,
    Playing,
    Paused,
    TimeToPreloadNextTrack,
    EndOfTrack,
    Unavailable,
    VolumeChanged,
    PositionCorrection,
    Seeked,
    TrackChanged,
    SessionConnected,
    SessionDisconnected,
    SessionClientChanged,
    ShuffleChanged,
    RepeatChanged,
    AutoPlayChanged,
    FilterExplicitContentChanged,
]

PLAYER_EVENT_TYPES: tuple[type, ...] = get_args(PlayerEvent)

_EVENTS_BY_NAME: dict[str, type] = {cls.__name__: cls for cls in PLAYER_EVENT_TYPES}


def _audio_item_from_dict(data: Any) -> AudioItem:
    if not isinstance(data, Mapping):
        raise ValueError("audio_item must be an object")
    raw_covers = data.get("covers") or []
    if not isinstance(raw_covers, (list, tuple)):
        raise ValueError("covers must be a list")
    if not all(isinstance(c, Mapping) for c in raw_covers):
        raise ValueError("each cover must be an object")
    covers = tuple(
        CoverImage(url=str(c["url"]), width=int(c["width"]), height=int(c["height"]))
        for c in raw_covers
    )
    return AudioItem(
        track_id=TrackId.from_base62(data["track_id"]),
        name=str(data["name"]),
        duration_ms=int(data["duration_ms"]),
        covers=covers,
    )


def event_from_dict(data: Mapping[str, Any]) -> PlayerEvent:
    """Build a player event from a JSON-style mapping.

    The mapping names the variant under ``"event"`` and carries its fields
    by name. Track ids are given as base62 text and ``audio_item`` as a
    nested mapping.

    Raises:
        ValueError: If the variant is unknown or a field is missing or invalid.
    """
    name = data.get("event")
    cls = _EVENTS_BY_NAME.get(name) if isinstance(name, str) else None
    if cls is None:
        raise ValueError(f"Unknown player event: {name!r}")

    kwargs: dict[str, Any] = {}
    try:
        for f in fields(cls):
            value = data[f.name]
            if f.name == "track_id":
                value = TrackId.from_base62(value)
            elif f.name == "audio_item":
                value = _audio_item_from_dict(value)
            elif f.type == "int":
                value = int(value)
            elif f.type == "bool":
                if not isinstance(value, bool):
                    raise ValueError(f"{f.name} must be a boolean")
            else:
                value = str(value)
            kwargs[f.name] = value
    except KeyError as err:
        raise ValueError(f"{name} is missing field {err.args[0]!r}") from err
    except TypeError as err:
        raise ValueError(f"Invalid {name} event: {err}") from err
    return cls(**kwargs)  # type: ignore[no-any-return]
