"""
Image generation, upscaling and styles.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import replace
from typing import Any

from ..exceptions import VeniceAPIError, VeniceValidationError
from ..models import MultipartForm, RequestOptions, ResponseType
from ..validation import (
    validate_image_generate_request,
    validate_image_upscale_request,
)
from .base import APIResource

DATA_URL_PATTERN = re.compile(
    r"^data:(?P<mime>[^;,]+)?(;base64)?,(?P<data>.*)$", re.DOTALL
)
DEFAULT_IMAGE_TYPE = "application/octet-stream"


def image_to_bytes(image: bytes | str) -> tuple[bytes, str]:
    """
    Normalize an image payload to raw bytes and a MIME type.

    Accepts raw bytes, a ``data:`` URL or a bare base64 string. Strings that are
    not valid base64 are sent as UTF-8 bytes.
    """
    if isinstance(image, bytes):
        return image, DEFAULT_IMAGE_TYPE

    match = DATA_URL_PATTERN.match(image)
    if match:
        mime = match.group("mime") or DEFAULT_IMAGE_TYPE
        try:
            return base64.b64decode(match.group("data")), mime
        except binascii.Error as e:
            raise VeniceValidationError(
                "Invalid image data URL", details={"image": str(e)}
            ) from e

    try:
        return base64.b64decode(image, validate=True), DEFAULT_IMAGE_TYPE
    except binascii.Error:
        return image.encode("utf-8"), DEFAULT_IMAGE_TYPE


class ImagesResource(APIResource):
    path = "/image"

    async def generate(
        self, request: dict[str, Any], options: RequestOptions | None = None
    ) -> dict[str, Any]:
        validate_image_generate_request(request)
        response = await self._http.post(self._path("/generate"), request, options)
        return response.data

    async def upscale(
        self,
        image: bytes | str,
        scale: int = 2,
        options: RequestOptions | None = None,
        **fields: Any,
    ) -> bytes | dict[str, Any]:
        """
        Upscale an image.

        Returns:
            The upscaled image bytes, or the decoded body when the API answers
            with JSON
        """
        validate_image_upscale_request({"image": image, "scale": scale, **fields})
        content, mime = image_to_bytes(image)

        form = MultipartForm(
            fields={
                "scale": str(scale),
                **{name: str(value) for name, value in fields.items()},
            },
            files={"image": ("image", content, mime)},
        )
        options = replace(
            options or RequestOptions(),
            body=form,
            response_type=ResponseType.ARRAYBUFFER,
        )
        response = await self._http.post(self._path("/upscale"), form, options)

        if response.headers.get("content-type", "").startswith("application/json"):
            try:
                return json.loads(response.data)
            except json.JSONDecodeError as e:
                raise VeniceAPIError(
                    f"Invalid JSON in response body: {e}", response.status
                ) from e
        return response.data

    async def styles(self, options: RequestOptions | None = None) -> dict[str, Any]:
        response = await self._http.get(self._path("/styles"), options=options)
        return response.data
