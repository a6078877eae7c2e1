from .filename import attachment_filename, sanitize_title

__all__ = ["attachment_filename", "sanitize_title"]
