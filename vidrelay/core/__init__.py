from .platform import Platform, detect_platform
from .state import RuntimeState, get_runtime

__all__ = ["Platform", "RuntimeState", "detect_platform", "get_runtime"]
