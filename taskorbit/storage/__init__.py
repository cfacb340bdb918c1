"""
Storage abstraction layer.
Provides a clean interface for data persistence that can be swapped out.
"""
import logging

from .interface import StorageError, StorageInterface
from .redis_storage import RedisStorage
from .sqlite_storage import SQLiteStorage

logger = logging.getLogger(__name__)


def create_storage(settings) -> StorageInterface:
    """Build the storage backend selected by settings.storage_backend."""
    if settings.storage_backend == "redis":
        logger.info("Using Redis storage")
        return RedisStorage(redis_url=settings.redis_url)
    logger.info(f"Using SQLite storage at {settings.db_path}")
    return SQLiteStorage(settings.db_path)


__all__ = ['StorageError', 'StorageInterface', 'SQLiteStorage', 'RedisStorage', 'create_storage']
