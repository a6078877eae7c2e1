import logging
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    """Content platforms the relay accepts"""
    YOUTUBE = "youtube"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"


PLATFORM_HOSTS = (
    (Platform.YOUTUBE, ("youtube.com", "youtu.be")),
    (Platform.TWITTER, ("twitter.com", "x.com")),
    (Platform.INSTAGRAM, ("instagram.com",)),
    (Platform.FACEBOOK, ("facebook.com", "fb.com")),
)

PRIMARY_PLATFORM = Platform.YOUTUBE


def detect_platform(url: Optional[str]) -> Optional[Platform]:
    """
    Classify a URL by hostname substring.
    Returns None for missing, malformed or unrecognized URLs.
    """
    if not url:
        return None

    try:
        hostname = urlparse(url).hostname
    except ValueError as e:
        logger.warning(f"URL parsing error: {e}")
        return None

    if not hostname:
        return None

    hostname = hostname.lower()
    for platform, hosts in PLATFORM_HOSTS:
        if any(host in hostname for host in hosts):
            return platform

    return None
