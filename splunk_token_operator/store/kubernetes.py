"""Kubernetes API implementation of ResourceStore."""

import asyncio
import logging
from typing import Any, Callable

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from splunk_token_operator.models import Resource, Secret
from splunk_token_operator.store.interfaces import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    R,
    ResourceStore,
    StoreError,
)

logger = logging.getLogger(__name__)


def load_kubernetes_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class KubernetesStore(ResourceStore):
    """Stores resources through the Kubernetes API server.

    Secrets go through CoreV1Api, everything else through CustomObjectsApi.
    The kubernetes client is synchronous, so calls run in a worker thread.
    """

    def __init__(self, api_client: client.ApiClient | None = None):
        """Initialize the store.

        Args:
            api_client: Optional configured ApiClient. If None, configuration
                is loaded from the cluster or the local kubeconfig.
        """
        if api_client is None:
            load_kubernetes_config()
            api_client = client.ApiClient()
        self.api_client = api_client
        self.core = client.CoreV1Api(api_client)
        self.custom = client.CustomObjectsApi(api_client)

    async def get(self, kind: type[R], namespace: str, name: str) -> R:
        if kind is Secret:
            secret = await self._call(
                "get", kind, namespace, name,
                self.core.read_namespaced_secret, name, namespace,
            )
            data = self.api_client.sanitize_for_serialization(secret)
        else:
            group, version = _split_api_version(kind)
            data = await self._call(
                "get", kind, namespace, name,
                self.custom.get_namespaced_custom_object,
                group, version, namespace, kind.PLURAL, name,
            )
        return kind.from_dict(data)

    async def create(self, obj: R) -> R:
        kind = type(obj)
        body = obj.to_dict()
        if kind is Secret:
            created = await self._call(
                "create", kind, obj.namespace, obj.name,
                self.core.create_namespaced_secret, obj.namespace, body,
            )
            data = self.api_client.sanitize_for_serialization(created)
        else:
            group, version = _split_api_version(kind)
            data = await self._call(
                "create", kind, obj.namespace, obj.name,
                self.custom.create_namespaced_custom_object,
                group, version, obj.namespace, kind.PLURAL, body,
            )
        logger.debug(f"Created {kind.KIND} {obj.namespace}/{obj.name}")
        return kind.from_dict(data)

    async def update(self, obj: R) -> R:
        kind = type(obj)
        body = obj.to_dict()
        if kind is Secret:
            updated = await self._call(
                "update", kind, obj.namespace, obj.name,
                self.core.replace_namespaced_secret, obj.name, obj.namespace, body,
            )
            data = self.api_client.sanitize_for_serialization(updated)
        else:
            group, version = _split_api_version(kind)
            data = await self._call(
                "update", kind, obj.namespace, obj.name,
                self.custom.replace_namespaced_custom_object,
                group, version, obj.namespace, kind.PLURAL, obj.name, body,
            )
        logger.debug(f"Updated {kind.KIND} {obj.namespace}/{obj.name}")
        return kind.from_dict(data)

    async def delete(self, obj: Resource) -> None:
        kind = type(obj)
        if kind is Secret:
            await self._call(
                "delete", kind, obj.namespace, obj.name,
                self.core.delete_namespaced_secret, obj.name, obj.namespace,
                propagation_policy="Background",
            )
        else:
            group, version = _split_api_version(kind)
            await self._call(
                "delete", kind, obj.namespace, obj.name,
                self.custom.delete_namespaced_custom_object,
                group, version, obj.namespace, kind.PLURAL, obj.name,
                propagation_policy="Background",
            )
        logger.debug(f"Requested deletion of {kind.KIND} {obj.namespace}/{obj.name}")

    async def _call(
        self,
        verb: str,
        kind: type[Resource],
        namespace: str,
        name: str,
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except ApiException as e:
            target = f"{kind.KIND} {namespace}/{name}"
            if e.status == 404:
                raise NotFoundError(f"{target} not found") from e
            if e.status == 409:
                if verb == "create":
                    raise AlreadyExistsError(f"{target} already exists") from e
                raise ConflictError(f"{target} was modified concurrently: {e.reason}") from e
            raise StoreError(f"failed to {verb} {target}: {e.status} {e.reason}") from e


def _split_api_version(kind: type[Resource]) -> tuple[str, str]:
    group, version = kind.API_VERSION.split("/", 1)
    return group, version
