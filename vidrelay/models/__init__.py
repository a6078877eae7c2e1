from .internal import DownloadedFile, DownloadIntent
from .response import FormatDescriptor, HealthResponse, MediaDescriptor

__all__ = [
    "DownloadedFile",
    "DownloadIntent",
    "FormatDescriptor",
    "HealthResponse",
    "MediaDescriptor",
]
