import logging
import os
import shutil
from typing import List

logger = logging.getLogger(__name__)


def ensure_download_dir(directory: str) -> str:
    os.makedirs(directory, exist_ok=True)
    return directory


def purge_download_dir(directory: str) -> int:
    """
    Delete everything left in the download directory by a previous run.
    Individual failures are logged and skipped.
    """
    try:
        ensure_download_dir(directory)
        entries = os.listdir(directory)
    except OSError as e:
        logger.error(f"Error reading downloads directory {directory}: {e}")
        return 0

    removed = 0
    for entry in entries:
        path = os.path.join(directory, entry)
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
            else:
                os.remove(path)
            removed += 1
        except OSError as e:
            logger.error(f"Error deleting file {entry}: {e}")

    if removed:
        logger.info(f"Purged {removed} leftover file(s) from {directory}")
    return removed


def find_outputs(directory: str, prefix: str) -> List[str]:
    """Files in directory whose name starts with prefix"""
    try:
        names = os.listdir(directory)
    except OSError:
        return []
    return sorted(os.path.join(directory, n) for n in names if n.startswith(prefix))


def remove_quietly(path: str) -> bool:
    """Best-effort delete; failures are logged, never raised"""
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error(f"Error deleting file {path}: {e}")
        return False
