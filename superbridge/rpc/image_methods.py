"""Artwork operations."""

from __future__ import annotations

from pydantic import BaseModel

from superbridge.rpc.context_models import HandlerContext
from superbridge.rpc.protocol import GET_IMAGE, GET_THUMBNAIL_IMAGE
from superbridge.rpc.router import ActionRouter


class ImageArgs(BaseModel):
    id: str


async def get_image(args: ImageArgs, ctx: HandlerContext) -> dict[str, str]:
    return {"image_data": await ctx.images.get_image_base64(args.id)}


def register_image_methods(router: ActionRouter) -> None:
    router.register(GET_IMAGE, get_image, schema=ImageArgs)
    # Thumbnails are served from the same full-size artwork
    router.register(GET_THUMBNAIL_IMAGE, get_image, schema=ImageArgs)
