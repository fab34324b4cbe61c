"""Base64 image payloads as submitted by the upload screen."""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=-]+)*;base64,", re.I)

DEFAULT_MEDIA_TYPE = "image/jpeg"


@dataclass(frozen=True)
class ImagePayload:
    """A receipt image as base64 text with its media type."""

    data: str
    media_type: str = DEFAULT_MEDIA_TYPE

    @classmethod
    def from_data(cls, raw: str) -> ImagePayload:
        """Parse base64 data, optionally prefixed with a data-URL marker.

        Raises:
            ValueError: If the payload is empty.
        """
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError("No image data provided")

        text = raw.strip()
        media_type = DEFAULT_MEDIA_TYPE
        match = _DATA_URL.match(text)
        if match:
            media_type = match.group("mime") or DEFAULT_MEDIA_TYPE
            text = text[match.end():]

        text = "".join(text.split())
        if not text:
            raise ValueError("No image data provided")
        return cls(data=text, media_type=media_type)

    @classmethod
    def from_file(cls, path: str | Path) -> ImagePayload:
        data = Path(path).read_bytes()
        media_type = mimetypes.guess_type(str(path))[0] or DEFAULT_MEDIA_TYPE
        return cls(
            data=base64.standard_b64encode(data).decode(),
            media_type=media_type,
        )

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"

    def to_bytes(self) -> bytes:
        """Decode the payload.

        Raises:
            ValueError: If the data is not valid base64.
        """
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Image data is not valid base64: {e}") from e
