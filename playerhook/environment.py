"""Mapping of player events to hook environment variables.

Every event sets ``PLAYER_EVENT`` to a short lowercase token naming the
event, followed by the event's payload. Track ids are written in base62;
an id without a base62 form leaves ``TRACK_ID`` unset.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from playerhook.events import (
    PLAYER_EVENT_TYPES,
    AudioItem,
    AutoPlayChanged,
    EndOfTrack,
    FilterExplicitContentChanged,
    Loading,
    Paused,
    PlayerEvent,
    Playing,
    PlayRequestIdChanged,
    PositionCorrection,
    Preloading,
    RepeatChanged,
    Seeked,
    SessionClientChanged,
    SessionConnected,
    SessionDisconnected,
    ShuffleChanged,
    Stopped,
    TimeToPreloadNextTrack,
    TrackChanged,
    TrackId,
    Unavailable,
    VolumeChanged,
)

ENV_KEYS = frozenset(
    {
        "PLAYER_EVENT",
        "PLAY_REQUEST_ID",
        "TRACK_ID",
        "POSITION_MS",
        "VOLUME",
        "TRACK_NAME",
        "TRACK_DURATION",
        "TRACK_COVER",
        "CONNECTION_ID",
        "USERNAME",
        "CLIENT_ID",
        "CLIENT_NAME",
        "CLIENT_BRAND",
        "CLIENT_MODEL",
        "SHUFFLE",
        "REPEAT",
        "AUTOPLAY",
        "FILTEREXPLICIT",
    }
)


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _set_track_id(env: dict[str, str], track_id: TrackId) -> None:
    encoded = track_id.to_base62()
    if encoded is None:
        env.pop("TRACK_ID", None)
    else:
        env["TRACK_ID"] = encoded


def _track_env(token: str, event: Any) -> dict[str, str]:
    """Environment for events carrying a track id and play request id."""
    env = {"PLAYER_EVENT": token}
    _set_track_id(env, event.track_id)
    env["PLAY_REQUEST_ID"] = str(event.play_request_id)
    return env


def _position_env(token: str, event: Any) -> dict[str, str]:
    env = _track_env(token, event)
    env["POSITION_MS"] = str(event.position_ms)
    return env


def audio_item_to_env(audio_item: AudioItem, env: dict[str, str]) -> None:
    """Add track metadata from an audio item to an environment mapping.

    ``TRACK_COVER`` is the URL of the widest cover image. When several share
    the largest width the first one wins; without covers the key is omitted.
    An existing ``TRACK_ID`` is replaced, or removed if the item's id has no
    base62 form.
    """
    _set_track_id(env, audio_item.track_id)
    env["TRACK_NAME"] = audio_item.name
    env["TRACK_DURATION"] = str(audio_item.duration_ms)
    if audio_item.covers:
        cover = max(audio_item.covers, key=lambda c: c.width)
        env["TRACK_COVER"] = cover.url


def _preloading(event: Preloading) -> dict[str, str]:
    env = {"PLAYER_EVENT": "preloading"}
    _set_track_id(env, event.track_id)
    return env


def _track_changed(event: TrackChanged) -> dict[str, str]:
    env = {"PLAYER_EVENT": "change"}
    audio_item_to_env(event.audio_item, env)
    return env


def _session(token: str) -> Callable[[Any], dict[str, str]]:
    def encode(event: SessionConnected | SessionDisconnected) -> dict[str, str]:
        return {
            "PLAYER_EVENT": token,
            "CONNECTION_ID": event.connection_id,
            "USERNAME": event.user_name,
        }

    return encode


def _client_changed(event: SessionClientChanged) -> dict[str, str]:
    return {
        "PLAYER_EVENT": "clientchanged",
        "CLIENT_ID": event.client_id,
        "CLIENT_NAME": event.client_name,
        "CLIENT_BRAND": event.client_brand_name,
        "CLIENT_MODEL": event.client_model_name,
    }


_ENCODERS: dict[type, Callable[[Any], dict[str, str]]] = {
    PlayRequestIdChanged: lambda e: {
        "PLAYER_EVENT": "playrequestid_changed",
        "PLAY_REQUEST_ID": str(e.play_request_id),
    },
    Stopped: lambda e: _track_env("stop", e),
    Loading: lambda e: _position_env("load", e),
    Preloading: _preloading,
    Playing: lambda e: _position_env("start", e),
    Paused: lambda e: _position_env("pause", e),
    TimeToPreloadNextTrack: lambda e: _track_env("preload", e),
    EndOfTrack: lambda e: _track_env("endoftrack", e),
    Unavailable: lambda e: _track_env("unavailable", e),
    VolumeChanged: lambda e: {"PLAYER_EVENT": "volumeset", "VOLUME": str(e.volume)},
    PositionCorrection: lambda e: _position_env("positioncorrection", e),
    Seeked: lambda e: _position_env("seeked", e),
    TrackChanged: _track_changed,
    SessionConnected: _session("sessionconnected"),
    SessionDisconnected: _session("sessiondisconnected"),
    SessionClientChanged: _client_changed,
    ShuffleChanged: lambda e: {"PLAYER_EVENT": "shuffle_changed", "SHUFFLE": _bool(e.shuffle)},
    RepeatChanged: lambda e: {
        "PLAYER_EVENT": "repeat_changed",
        "REPEAT": "all" if e.repeat else "none",
    },
    AutoPlayChanged: lambda e: {
        "PLAYER_EVENT": "autoplay_changed",
        "AUTOPLAY": _bool(e.auto_play),
    },
    FilterExplicitContentChanged: lambda e: {
        "PLAYER_EVENT": "filterexplicit_changed",
        "FILTEREXPLICIT": _bool(e.filter),
    },
}

# Fail at import time when an event type has no encoder
_missing = [cls.__name__ for cls in PLAYER_EVENT_TYPES if cls not in _ENCODERS]
if _missing:
    raise RuntimeError(f"No environment encoder for player events: {', '.join(_missing)}")


def event_to_env(event: PlayerEvent) -> dict[str, str]:
    """Build the hook environment for a player event.

    Args:
        event: The player event to encode.

    Returns:
        A fresh mapping of environment variable names to values.

    Raises:
        TypeError: If ``event`` is not a player event.
    """
    encoder = _ENCODERS.get(type(event))
    if encoder is None:
        raise TypeError(f"Not a player event: {event!r}")
    return encoder(event)
