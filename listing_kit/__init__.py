# Listing kit package for profile and kit record management

from .store import (
    ProfileStore,
    KitStore,
    StoreError,
    StoreTimeout,
)
from .logging_config import (
    setup_logging,
    stop_logging,
    ThreadSafeLoggingConfig,
)

__all__ = [
    "ProfileStore",
    "KitStore",
    "StoreError",
    "StoreTimeout",
    "setup_logging",
    "stop_logging",
    "ThreadSafeLoggingConfig",
]
