import re
from typing import Optional

UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")


def sanitize_title(title: Optional[str], fallback: str = "video") -> str:
    """
    Turn a video title into a token safe for file names and headers.
    Every character other than an ASCII letter or digit becomes an underscore.
    """
    name = title or fallback
    return UNSAFE_CHARS.sub("_", name).lower()


def attachment_filename(title: Optional[str], fallback: str = "video", ext: str = "mp4") -> str:
    return f"{sanitize_title(title, fallback)}.{ext}"
