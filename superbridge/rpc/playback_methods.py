"""Playback control operations.

These never answer with a call_result: the new state reaches the remote as a
player_state push once the sync engine has refetched.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from superbridge.rpc.context_models import HandlerContext
from superbridge.rpc.protocol import PLAY_URI, SET_PLAYBACK_SPEED, NoReply
from superbridge.rpc.router import ActionRouter


class PlayUriArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uri: str
    context_uri: str = Field(alias="contextURI")
    skip_to_uri: str | None = Field(default=None, alias="skipToURI")


class PlaybackSpeedArgs(BaseModel):
    playback_speed: float


async def play_uri(args: PlayUriArgs, ctx: HandlerContext) -> NoReply:
    started = await ctx.sync.play_uri(args.context_uri, args.skip_to_uri)
    return NoReply("state pushed" if started else "no active device")


async def set_playback_speed(args: PlaybackSpeedArgs, ctx: HandlerContext) -> NoReply:
    # Speed 0 is pause; anything else resumes
    changed = await ctx.sync.set_playing(args.playback_speed != 0)
    return NoReply("state pushed" if changed else "no active device")


def register_playback_methods(router: ActionRouter) -> None:
    router.register(PLAY_URI, play_uri, schema=PlayUriArgs)
    router.register(SET_PLAYBACK_SPEED, set_playback_speed, schema=PlaybackSpeedArgs)
