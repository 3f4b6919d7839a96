"""Reconciler that gives every ClusterDeployment a SplunkToken."""

import logging

from kubernetes.client import V1ObjectMeta

from splunk_token_operator.config import (
    CLUSTER_ID_LABEL,
    CLUSTER_TYPE_LABEL,
    MANAGEMENT_CLUSTER_TYPE,
    SYNCSET_NAME,
    TOKEN_OBJECT_NAME,
    TOKEN_SECRET_NAME,
    Settings,
    SplunkIndexes,
    get_settings,
)
from splunk_token_operator.models import (
    ClusterDeployment,
    SecretMapping,
    SplunkToken,
    SplunkTokenSpec,
    SyncSet,
    set_owner_reference,
)
from splunk_token_operator.store import NotFoundError, ResourceStore

logger = logging.getLogger(__name__)


class LabelMissingError(Exception):
    """Raised when a ClusterDeployment lacks a required label."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"label {label} not found on ClusterDeployment")


class ClusterDeploymentReconciler:
    """Ensures ClusterDeployments have a matching SplunkToken and SyncSet."""

    def __init__(self, store: ResourceStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    def index_config(self, cluster: ClusterDeployment) -> SplunkIndexes:
        """Pick the index table for the cluster's type."""
        if (cluster.metadata.labels or {}).get(CLUSTER_TYPE_LABEL) == MANAGEMENT_CLUSTER_TYPE:
            logger.info(f"Setting log indexes for management cluster {cluster.name}")
            return self.settings.hcp_indexes
        logger.info(f"Setting log indexes for classic cluster {cluster.name}")
        return self.settings.classic_indexes

    def desired_spec(self, cluster: ClusterDeployment) -> SplunkTokenSpec:
        """Compute the SplunkToken spec for a cluster.

        Raises:
            LabelMissingError: If the cluster ID label is absent.
        """
        token_name = (cluster.metadata.labels or {}).get(CLUSTER_ID_LABEL)
        if token_name is None:
            raise LabelMissingError(CLUSTER_ID_LABEL)
        indexes = self.index_config(cluster)
        return SplunkTokenSpec(
            name=token_name,
            default_index=indexes.default_index,
            allowed_indexes=list(indexes.allowed_indexes),
        )

    async def reconcile(self, namespace: str, name: str) -> None:
        try:
            cluster = await self.store.get(ClusterDeployment, namespace, name)
        except NotFoundError:
            logger.info(f"ClusterDeployment {namespace}/{name} not found")
            return

        spec = self.desired_spec(cluster)
        await self._ensure_token(cluster, spec)
        await self._ensure_syncset(cluster)

    async def _ensure_token(
        self, cluster: ClusterDeployment, spec: SplunkTokenSpec
    ) -> None:
        namespace = cluster.namespace
        try:
            token = await self.store.get(SplunkToken, namespace, TOKEN_OBJECT_NAME)
        except NotFoundError:
            logger.info(f"SplunkToken {namespace}/{TOKEN_OBJECT_NAME} does not exist, creating")
            token = SplunkToken(
                metadata=V1ObjectMeta(name=TOKEN_OBJECT_NAME, namespace=namespace),
                spec=spec,
            )
            set_owner_reference(cluster, token)
            await self.store.create(token)
            return

        if (
            token.spec.default_index == spec.default_index
            and token.spec.allowed_indexes == spec.allowed_indexes
        ):
            logger.info(f"SplunkToken {namespace}/{TOKEN_OBJECT_NAME} spec is unchanged")
            return

        logger.info(f"Updating SplunkToken {namespace}/{TOKEN_OBJECT_NAME} indexes")
        token.spec = spec
        set_owner_reference(cluster, token)
        await self.store.update(token)

    async def _ensure_syncset(self, cluster: ClusterDeployment) -> None:
        namespace = cluster.namespace
        try:
            await self.store.get(SyncSet, namespace, SYNCSET_NAME)
        except NotFoundError:
            await self._create_syncset(cluster)

    async def _create_syncset(self, cluster: ClusterDeployment) -> None:
        namespace = cluster.namespace
        logger.info(f"Creating SyncSet {namespace}/{SYNCSET_NAME}")
        syncset = SyncSet(
            metadata=V1ObjectMeta(name=SYNCSET_NAME, namespace=namespace),
            cluster_deployment_refs=[cluster.name],
            secret_mappings=[
                SecretMapping(
                    source_name=TOKEN_SECRET_NAME,
                    source_namespace=namespace,
                    target_name=self.settings.forwarder_secret_name,
                    target_namespace=self.settings.forwarder_namespace,
                )
            ],
        )
        set_owner_reference(cluster, syncset)
        await self.store.create(syncset)
