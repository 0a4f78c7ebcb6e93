"""Helpers for images posted as data: URLs by the listing form"""
import base64
import binascii
import re
from typing import Tuple

DATA_URL_RE = re.compile(r"^data:(?P<content_type>image/[\w.+-]+)?(?P<params>(;[\w-]+=[\w.-]+)*)(?P<base64>;base64)?,(?P<data>.*)$", re.DOTALL)


def is_data_url(url: str) -> bool:
    return url.startswith("data:")


def parse_data_url(url: str) -> Tuple[str, bytes]:
    """Split an image data: URL into its content type and decoded bytes"""
    match = DATA_URL_RE.match(url)
    if not match or not match.group("content_type"):
        raise ValueError("Image must be an image/* data URL")
    if not match.group("base64"):
        raise ValueError("Image data URL must be base64 encoded")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Image data URL is not valid base64")
    if not data:
        raise ValueError("Image data URL is empty")
    return match.group("content_type"), data
