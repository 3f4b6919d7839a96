"""Abstract interface for the resource store the reconcilers act on.

Objects form an ownership graph:

    ClusterDeployment -> SplunkToken -> Secret
    ClusterDeployment -> SyncSet

The store, not the operator, is responsible for its semantics:

* Deleting an object whose finalizer list is non-empty only sets its
  deletion timestamp. The object is removed once an update empties the list.
* Removing an object cascades to every object holding an owner reference to
  it, and those dependents go through the same finalizer rule.
* Updates carry the resource version that was read; a stale version is
  rejected with ConflictError.
"""

from abc import ABC, abstractmethod
from typing import TypeVar

from splunk_token_operator.models import Resource

R = TypeVar("R", bound=Resource)


class StoreError(Exception):
    """Raised when a store operation fails."""

    pass


class NotFoundError(StoreError):
    """Raised when the requested object does not exist."""

    pass


class AlreadyExistsError(StoreError):
    """Raised when creating an object that already exists."""

    pass


class ConflictError(StoreError):
    """Raised when an update is based on a stale resource version."""

    pass


class ResourceStore(ABC):
    """CRUD access to namespaced resources."""

    @abstractmethod
    async def get(self, kind: type[R], namespace: str, name: str) -> R:
        """Fetch an object. Raises NotFoundError if it does not exist."""
        ...

    @abstractmethod
    async def create(self, obj: R) -> R:
        """Create an object. Returns it as stored (uid, resource version, timestamps)."""
        ...

    @abstractmethod
    async def update(self, obj: R) -> R:
        """Replace an object. Returns it as stored."""
        ...

    @abstractmethod
    async def delete(self, obj: Resource) -> None:
        """Request deletion of an object."""
        ...
