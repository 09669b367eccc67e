from __future__ import annotations
import base64
import re
from typing import Optional

DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w\-\./\+]+)?(?:;[\w\-]+=[\w\-\.]+)*;base64,(?P<b64>.*)$", re.I | re.S)


def decoded_size(image_data: str) -> int:
    """Byte size of a base64 payload (bare or data URL) without decoding it."""
    m = DATA_URL_RE.match(image_data)
    b64 = m.group("b64") if m else image_data
    b64 = "".join(b64.split())
    padding = len(b64) - len(b64.rstrip("="))
    return max(0, (len(b64) * 3) // 4 - padding)


def sanitize_image_data(image_data, max_bytes: int) -> Optional[str]:
    # Oversize or non-text images are dropped, never rejected
    if not image_data or not isinstance(image_data, str):
        return None
    if decoded_size(image_data) > max_bytes:
        return None
    return image_data


def to_data_url(blob: bytes, mime: str = "application/octet-stream") -> str:
    return f"data:{mime};base64,{base64.b64encode(blob).decode('ascii')}"
