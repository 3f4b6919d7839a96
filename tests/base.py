"""Test doubles and fixtures shared by the reconciler tests."""

import copy
import unittest
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from kubernetes.client import V1ObjectMeta

from splunk_token_operator.config import (
    CLUSTER_ID_LABEL,
    TOKEN_FINALIZER,
    TOKEN_OBJECT_NAME,
    Settings,
    SplunkIndexes,
)
from splunk_token_operator.models import (
    ClusterDeployment,
    Resource,
    SplunkToken,
    SplunkTokenSpec,
)
from splunk_token_operator.splunk import HECToken, TokenManager
from splunk_token_operator.store import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    ResourceStore,
)

TEST_NAMESPACE = "test-namespace"


class InMemoryStore(ResourceStore):
    """In-memory resource store with API-server-like semantics.

    Objects are held in their dict form, so callers never share state with
    the store. Deletion honours finalizers, removal cascades to dependents
    through owner references, and updates with a stale resource version are
    rejected.
    """

    def __init__(self, *objects: Resource):
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.writes: list[tuple[str, str, str, str]] = []
        self._version = 0
        for obj in objects:
            self.seed(obj)

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    @staticmethod
    def _key(kind: str, namespace: str, name: str) -> tuple[str, str, str]:
        return (kind, namespace, name)

    def seed(self, obj: Resource) -> None:
        """Add an object without recording a write."""
        data = obj.to_dict()
        meta = data["metadata"]
        meta.setdefault("uid", str(uuid4()))
        meta.setdefault("creationTimestamp", datetime.now(timezone.utc).isoformat())
        meta["resourceVersion"] = self._next_version()
        self.objects[self._key(obj.KIND, obj.namespace, obj.name)] = data

    def has(self, kind: type[Resource], namespace: str, name: str) -> bool:
        return self._key(kind.KIND, namespace, name) in self.objects

    async def get(self, kind, namespace, name):
        key = self._key(kind.KIND, namespace, name)
        if key not in self.objects:
            raise NotFoundError(f"{kind.KIND} {namespace}/{name} not found")
        return kind.from_dict(copy.deepcopy(self.objects[key]))

    async def create(self, obj):
        key = self._key(obj.KIND, obj.namespace, obj.name)
        if key in self.objects:
            raise AlreadyExistsError(f"{obj.KIND} {obj.namespace}/{obj.name} already exists")
        data = obj.to_dict()
        meta = data["metadata"]
        meta["uid"] = str(uuid4())
        meta["creationTimestamp"] = datetime.now(timezone.utc).isoformat()
        meta.pop("deletionTimestamp", None)
        meta["resourceVersion"] = self._next_version()
        self.objects[key] = data
        self.writes.append(("create", obj.KIND, obj.namespace, obj.name))
        return type(obj).from_dict(copy.deepcopy(data))

    async def update(self, obj):
        key = self._key(obj.KIND, obj.namespace, obj.name)
        if key not in self.objects:
            raise NotFoundError(f"{obj.KIND} {obj.namespace}/{obj.name} not found")
        stored = self.objects[key]
        if obj.metadata.resource_version != stored["metadata"]["resourceVersion"]:
            raise ConflictError(f"{obj.KIND} {obj.namespace}/{obj.name} was modified")

        data = obj.to_dict()
        meta = data["metadata"]
        for server_field in ("uid", "creationTimestamp", "deletionTimestamp"):
            if server_field in stored["metadata"]:
                meta[server_field] = stored["metadata"][server_field]
            else:
                meta.pop(server_field, None)
        meta["resourceVersion"] = self._next_version()
        self.objects[key] = data
        self.writes.append(("update", obj.KIND, obj.namespace, obj.name))

        if "deletionTimestamp" in meta and not meta.get("finalizers"):
            self._remove(key)
        return type(obj).from_dict(copy.deepcopy(data))

    async def delete(self, obj):
        key = self._key(obj.KIND, obj.namespace, obj.name)
        if key not in self.objects:
            raise NotFoundError(f"{obj.KIND} {obj.namespace}/{obj.name} not found")
        self.writes.append(("delete", obj.KIND, obj.namespace, obj.name))
        self._mark_deleted(key)

    def _mark_deleted(self, key: tuple[str, str, str]) -> None:
        meta = self.objects[key]["metadata"]
        if meta.get("finalizers"):
            if "deletionTimestamp" not in meta:
                meta["deletionTimestamp"] = datetime.now(timezone.utc).isoformat()
                meta["resourceVersion"] = self._next_version()
            return
        self._remove(key)

    def _remove(self, key: tuple[str, str, str]) -> None:
        removed = self.objects.pop(key)
        uid = removed["metadata"].get("uid")
        dependents = [
            other_key
            for other_key, other in self.objects.items()
            if any(
                ref.get("uid") == uid
                for ref in other["metadata"].get("ownerReferences", [])
            )
        ]
        for dependent in dependents:
            if dependent in self.objects:
                self._mark_deleted(dependent)


class MockTokenManager(TokenManager):
    """Mock Splunk token manager recording every call."""

    def __init__(
        self,
        value: str = "<guid-value>",
        create_error: Exception | None = None,
        delete_error: Exception | None = None,
    ):
        self.value = value
        self.create_error = create_error
        self.delete_error = delete_error
        self.created: list[HECToken] = []
        self.read: list[str] = []
        self.deleted: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.created) + len(self.read) + len(self.deleted)

    async def create_token(self, token: HECToken) -> HECToken:
        self.created.append(token)
        if self.create_error is not None:
            raise self.create_error
        return HECToken(spec=token.spec, value=self.value)

    async def read_token(self, name: str) -> HECToken:
        self.read.append(name)
        return HECToken(spec=SplunkTokenSpec(name=name), value=self.value)

    async def delete_token(self, name: str) -> None:
        self.deleted.append(name)
        if self.delete_error is not None:
            raise self.delete_error


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values: dict[str, Any] = {
        "splunk_instance": "<splunk-collector-uri>",
        "splunk_jwt": "foo",
        "token_max_age": timedelta(hours=1),
        "classic_indexes": SplunkIndexes(
            default_index="classic_index",
            allowed_indexes=["another_classic_index"],
        ),
        "hcp_indexes": SplunkIndexes(
            default_index="hcp_index",
            allowed_indexes=["another_hcp_index"],
        ),
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_splunk_token(
    name: str = "<internal-cluster-id>",
    created: datetime | None = None,
    deleted: datetime | None = None,
    finalizer: bool = True,
) -> SplunkToken:
    token = SplunkToken(
        metadata=V1ObjectMeta(
            name=TOKEN_OBJECT_NAME,
            namespace=TEST_NAMESPACE,
            creation_timestamp=created or datetime.now(timezone.utc),
            deletion_timestamp=deleted,
            finalizers=[TOKEN_FINALIZER] if finalizer else [],
        ),
        spec=SplunkTokenSpec(name=name),
    )
    return token


def make_cluster_deployment(labels: dict[str, str] | None = None) -> ClusterDeployment:
    if labels is None:
        labels = {CLUSTER_ID_LABEL: "foo-cluster-id"}
    return ClusterDeployment(
        metadata=V1ObjectMeta(name="foo", namespace=TEST_NAMESPACE, labels=labels),
    )


class ReconcilerTestCase(unittest.IsolatedAsyncioTestCase):
    """Base test case providing settings and a Splunk mock."""

    def setUp(self):
        self.settings = make_settings()
        self.splunk = MockTokenManager()
