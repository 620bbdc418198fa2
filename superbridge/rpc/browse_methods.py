"""Library browsing operations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from superbridge.cache.images import select_image_id
from superbridge.rpc.context_models import HandlerContext
from superbridge.rpc.protocol import GET_CHILDREN_OF_ITEM, GET_HOME, NoReply
from superbridge.rpc.router import ActionRouter
from superbridge.upstream.queries import get_album, get_albums_list
from superbridge.utils.helpers import map_first_or

ALBUMS_SHELF_URI = "spotify:collection:albums"


class ChildrenOfItemArgs(BaseModel):
    # A uri; not necessarily an album
    parent_id: str


def _album_card(album: dict[str, Any]) -> dict[str, Any]:
    return {
        "title": album.get("name"),
        "subtitle": map_first_or(album.get("artists"), lambda artist: artist.get("name"), "Unknown Artist"),
        "uri": album.get("uri"),
        "image_id": select_image_id(album.get("images")),
    }


async def get_home(_args: Any, ctx: HandlerContext) -> dict[str, Any]:
    saved = await get_albums_list(ctx.api, ctx.cache, ttl=ctx.config.cache.library_ttl_s)
    entries = [e for e in (saved.get("items") or []) if isinstance(e, dict) and isinstance(e.get("album"), dict)]
    children = [_album_card(e["album"]) for e in entries]
    return {
        "items": [
            {
                "title": "Albums",
                "uri": ALBUMS_SHELF_URI,
                "children": children,
                "total": saved.get("total", len(children)),
            }
        ]
    }


async def get_children_of_item(args: ChildrenOfItemArgs, ctx: HandlerContext) -> dict[str, Any] | NoReply:
    album = await get_album(ctx.api, ctx.cache, args.parent_id, ttl=ctx.config.cache.album_ttl_s)
    if not album:
        return NoReply(f"no album for {args.parent_id}")

    image_id = select_image_id(album.get("images"))
    tracks = album.get("tracks") or {}
    items = [
        {
            "id": track.get("id"),
            "image_id": image_id,
            "playable": True,
            "subtitle": ", ".join(a.get("name") or "" for a in track.get("artists") or []),
            "title": track.get("name"),
            "uri": track.get("uri"),
            "available_offline": False,
            "content_description": "",
            "has_children": False,
            "metadata": {
                "is_explicit_content": bool(track.get("explicit")),
                "duration_ms": track.get("duration_ms"),
            },
        }
        for track in tracks.get("items") or []
        if isinstance(track, dict)
    ]
    return {"success": True, "total": tracks.get("total", len(items)), "items": items}


def register_browse_methods(router: ActionRouter) -> None:
    router.register(GET_HOME, get_home)
    router.register(GET_CHILDREN_OF_ITEM, get_children_of_item, schema=ChildrenOfItemArgs)
