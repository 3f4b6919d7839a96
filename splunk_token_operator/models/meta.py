"""Object metadata shared by every resource the operator handles.

Metadata, owner references and their wire form come from the kubernetes
client's own models; only the resource bodies are modelled here.
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, ClassVar, TypeVar

from kubernetes.client import ApiClient, V1ObjectMeta, V1OwnerReference

R = TypeVar("R", bound="Resource")


class _JSONPayload:
    """Response stand-in accepted by ApiClient.deserialize."""

    def __init__(self, data: Any):
        self.data = json.dumps(data)


@lru_cache
def _api_client() -> ApiClient:
    return ApiClient()


def serialize(obj: Any) -> Any:
    """Convert kubernetes client models to their JSON-ready form."""
    return _api_client().sanitize_for_serialization(obj)


def deserialize(data: Any, klass: str) -> Any:
    """Build a kubernetes client model (e.g. "V1ObjectMeta") from JSON data."""
    return _api_client().deserialize(_JSONPayload(data), klass)


@dataclass
class Resource:
    """Base class for typed Kubernetes objects.

    Subclasses set API_VERSION, KIND and PLURAL and implement the body
    conversion for everything outside metadata. Metadata round-trips in
    full, so fields the operator does not use (annotations, managed fields)
    survive a read-modify-write.
    """

    API_VERSION: ClassVar[str]
    KIND: ClassVar[str]
    PLURAL: ClassVar[str]

    metadata: V1ObjectMeta

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "apiVersion": self.API_VERSION,
            "kind": self.KIND,
            "metadata": serialize(self.metadata),
        }
        result.update(self._body_to_dict())
        return result

    @classmethod
    def from_dict(cls: type[R], data: dict[str, Any]) -> R:
        metadata = deserialize(data.get("metadata") or {}, "V1ObjectMeta")
        return cls(metadata=metadata, **cls._body_from_dict(data))

    def _body_to_dict(self) -> dict[str, Any]:
        return {}

    @classmethod
    def _body_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {}


def _group(api_version: str) -> str:
    return api_version.split("/")[0] if "/" in api_version else ""


def refers_to(ref: V1OwnerReference, owner: Resource) -> bool:
    """Whether an owner reference points at the given object."""
    return (
        _group(ref.api_version) == _group(owner.API_VERSION)
        and ref.kind == owner.KIND
        and ref.name == owner.metadata.name
    )


def add_finalizer(obj: Resource, finalizer: str) -> bool:
    """Add a finalizer. Returns True if the object was changed."""
    finalizers = obj.metadata.finalizers or []
    if finalizer in finalizers:
        return False
    obj.metadata.finalizers = finalizers + [finalizer]
    return True


def remove_finalizer(obj: Resource, finalizer: str) -> bool:
    """Remove a finalizer. Returns True if the object was changed."""
    finalizers = obj.metadata.finalizers or []
    if finalizer not in finalizers:
        return False
    obj.metadata.finalizers = [f for f in finalizers if f != finalizer]
    return True


def set_owner_reference(owner: Resource, obj: Resource) -> None:
    """Add or refresh a non-controller owner reference to owner on obj."""
    ref = V1OwnerReference(
        api_version=owner.API_VERSION,
        kind=owner.KIND,
        name=owner.metadata.name,
        uid=owner.metadata.uid,
    )
    _upsert_owner_reference(obj, ref, owner)


def set_controller_reference(owner: Resource, obj: Resource) -> None:
    """Make owner the managing controller of obj.

    Raises:
        ValueError: If obj is already controlled by a different object.
    """
    for existing in obj.metadata.owner_references or []:
        if existing.controller and not refers_to(existing, owner):
            raise ValueError(
                f"{obj.KIND} {obj.namespace}/{obj.name} is already owned by "
                f"{existing.kind} {existing.name}"
            )
    ref = V1OwnerReference(
        api_version=owner.API_VERSION,
        kind=owner.KIND,
        name=owner.metadata.name,
        uid=owner.metadata.uid,
        controller=True,
        block_owner_deletion=True,
    )
    _upsert_owner_reference(obj, ref, owner)


def _upsert_owner_reference(obj: Resource, ref: V1OwnerReference, owner: Resource) -> None:
    refs = list(obj.metadata.owner_references or [])
    for i, existing in enumerate(refs):
        if refers_to(existing, owner):
            refs[i] = ref
            break
    else:
        refs.append(ref)
    obj.metadata.owner_references = refs
