"""Wire shapes of the remote's inter-app action protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

CALL_RESULT = "call_result"
PLAYER_STATE_EVENT = "com.spotify.superbird.player_state"
SESSION_STATE_EVENT = "com.spotify.session_state"
SETTINGS_RESPONSE = "settings_response"

# Known inter-app actions
GET_HOME = "com.spotify.superbird.get_home"
GET_CHILDREN_OF_ITEM = "com.spotify.get_children_of_item"
GET_IMAGE = "com.spotify.get_image"
GET_THUMBNAIL_IMAGE = "com.spotify.get_thumbnail_image"
PERMISSIONS = "com.spotify.superbird.permissions"
PLAY_URI = "com.spotify.play_uri"
SET_PLAYBACK_SPEED = "com.spotify.set_playback_speed"
INSTRUMENTATION_LOG = "com.spotify.superbird.instrumentation.log"
GET_TIPS_AND_TRICKS = "com.spotify.superbird.tipsandtricks.get_tips_and_tricks"

# settings key -> value the remote expects back
SETTINGS_DEFAULTS: dict[str, str] = {
    "onboarding_status": "finished",
    "local-storage-data": "{}",
}


class InboundRequest(BaseModel):
    """``{msgId, method, args, userAction}`` request envelope."""

    model_config = ConfigDict(populate_by_name=True)

    correlation_id: StrictInt = Field(alias="msgId")
    operation_name: StrictStr = Field(alias="method", min_length=1)
    arguments: Any = Field(default=None, alias="args")
    is_user_initiated: StrictBool = Field(default=False, alias="userAction")


@dataclass(frozen=True, slots=True)
class Reply:
    """Handler outcome that is sent back as a ``call_result``."""

    payload: Any


@dataclass(frozen=True, slots=True)
class NoReply:
    """Handler outcome meaning no response envelope is sent."""

    reason: str = ""


DispatchOutcome = Reply | NoReply


def as_outcome(result: Any) -> DispatchOutcome:
    if isinstance(result, (Reply, NoReply)):
        return result
    return Reply(result)


def build_reply(msg_id: int, payload: Any) -> dict[str, Any]:
    return {"type": CALL_RESULT, "msgId": msg_id, "payload": payload}


def build_push(message_type: str, payload: Any) -> dict[str, Any]:
    return {"type": message_type, "payload": payload}


def session_announcements() -> list[dict[str, Any]]:
    """Fixed status pushes sent to a freshly connected remote."""
    return [
        build_push("remote_control_connection_status", "finished"),
        build_push("setup_status", "finished"),
        build_push(
            SESSION_STATE_EVENT,
            {
                "connection_type": "wlan",
                "is_in_forced_offline_mode": False,
                "is_logged_in": True,
                "is_offline": False,
            },
        ),
    ]


def build_settings_response(frame: Any) -> dict[str, Any] | None:
    """Answer a ``{type: "settings", key}`` frame; None for other frames or keys."""
    if not isinstance(frame, dict) or frame.get("type") != "settings":
        return None
    key = frame.get("key")
    if not isinstance(key, str) or key not in SETTINGS_DEFAULTS:
        return None
    return build_push(SETTINGS_RESPONSE, {"key": key, "value": SETTINGS_DEFAULTS[key]})
