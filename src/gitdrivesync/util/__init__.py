from .aio import run_sync
from .mime import FOLDER_MIME, is_folder
from .time import normalize_dt, now_utc, to_rfc3339

__all__ = [
    "run_sync",
    "FOLDER_MIME",
    "is_folder",
    "now_utc",
    "to_rfc3339",
    "normalize_dt",
]
