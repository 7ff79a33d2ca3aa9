from .base import STORAGE_KEYS, BaseDatabase
from .backup import BackupMixin
from .preferences import PreferencesMixin
from .records import RecordsMixin

__all__ = [
    "STORAGE_KEYS",
    "BaseDatabase",
    "BackupMixin",
    "PreferencesMixin",
    "RecordsMixin",
]
