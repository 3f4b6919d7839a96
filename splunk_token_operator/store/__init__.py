"""Resource store abstraction layer."""

from splunk_token_operator.store.interfaces import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    ResourceStore,
    StoreError,
)

__all__ = [
    "AlreadyExistsError",
    "ConflictError",
    "NotFoundError",
    "ResourceStore",
    "StoreError",
]
