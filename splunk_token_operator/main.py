"""Operator entry point: kopf handlers wired to the reconcilers.

kopf watches the resources and invokes these handlers; each handler runs one
reconcile pass under a deadline. Exceptions propagate to kopf, which retries
change handlers with its own backoff.
"""

import asyncio
import logging
from typing import Any

import kopf

from splunk_token_operator.config import (
    HIVE_GROUP,
    HIVE_VERSION,
    MANAGED_BY_LABEL,
    OPERATOR_NAME,
    SPLUNKTOKEN_GROUP,
    SPLUNKTOKEN_VERSION,
    TOKEN_SECRET_NAME,
    get_settings,
)
from splunk_token_operator.controllers import (
    ClusterDeploymentReconciler,
    SplunkTokenReconciler,
)
from splunk_token_operator.models import ClusterDeployment, SplunkToken
from splunk_token_operator.splunk import SplunkClient
from splunk_token_operator.store.kubernetes import KubernetesStore

logger = logging.getLogger(__name__)

settings = get_settings()


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    """Build the Splunk client, the store and both reconcilers."""
    app_settings = get_settings()
    if app_settings.debug:
        logging.getLogger("splunk_token_operator").setLevel(logging.DEBUG)

    settings.posting.level = logging.WARNING
    settings.networking.request_timeout = app_settings.request_timeout

    store = KubernetesStore()
    splunk_api = SplunkClient(
        app_settings.splunk_instance,
        app_settings.splunk_jwt,
        acs_hostname=app_settings.acs_hostname,
        timeout=app_settings.request_timeout,
    )

    memo.reconcile_timeout = app_settings.reconcile_timeout
    memo.splunk_instance = app_settings.splunk_instance
    memo.cluster_reconciler = ClusterDeploymentReconciler(store, app_settings)
    memo.token_reconciler = SplunkTokenReconciler(store, splunk_api, app_settings)
    logger.info(f"Operator configured for Splunk stack {app_settings.splunk_instance}")


async def _run(memo: kopf.Memo, reconciler: Any, namespace: str, name: str) -> None:
    await asyncio.wait_for(
        reconciler.reconcile(namespace, name), timeout=memo.reconcile_timeout
    )


def _owners(meta: kopf.Meta | dict[str, Any], kind: str) -> list[str]:
    return [
        ref["name"]
        for ref in meta.get("ownerReferences") or []
        if ref.get("kind") == kind
    ]


@kopf.on.create(HIVE_GROUP, HIVE_VERSION, ClusterDeployment.PLURAL)
@kopf.on.update(HIVE_GROUP, HIVE_VERSION, ClusterDeployment.PLURAL)
@kopf.on.resume(HIVE_GROUP, HIVE_VERSION, ClusterDeployment.PLURAL)
async def reconcile_clusterdeployment(
    namespace: str, name: str, memo: kopf.Memo, **_: Any
) -> None:
    """Ensure the ClusterDeployment has a SplunkToken and SyncSet."""
    await _run(memo, memo.cluster_reconciler, namespace, name)


@kopf.on.create(SPLUNKTOKEN_GROUP, SPLUNKTOKEN_VERSION, SplunkToken.PLURAL)
@kopf.on.update(SPLUNKTOKEN_GROUP, SPLUNKTOKEN_VERSION, SplunkToken.PLURAL)
@kopf.on.resume(SPLUNKTOKEN_GROUP, SPLUNKTOKEN_VERSION, SplunkToken.PLURAL)
@kopf.on.delete(SPLUNKTOKEN_GROUP, SPLUNKTOKEN_VERSION, SplunkToken.PLURAL, optional=True)
async def reconcile_splunktoken(
    namespace: str, name: str, memo: kopf.Memo, **_: Any
) -> None:
    """Create, rotate or tear down the HEC token behind a SplunkToken."""
    await _run(memo, memo.token_reconciler, namespace, name)


@kopf.timer(
    SPLUNKTOKEN_GROUP,
    SPLUNKTOKEN_VERSION,
    SplunkToken.PLURAL,
    interval=settings.resync_interval,
)
async def resync_splunktoken(
    namespace: str, name: str, memo: kopf.Memo, **_: Any
) -> None:
    """Periodic pass so tokens get rotated once they pass their maximum age."""
    await _run(memo, memo.token_reconciler, namespace, name)


@kopf.on.event(SPLUNKTOKEN_GROUP, SPLUNKTOKEN_VERSION, SplunkToken.PLURAL)
async def splunktoken_removed(
    type: str, namespace: str, meta: kopf.Meta, memo: kopf.Memo, **_: Any
) -> None:
    """Recreate a rotated SplunkToken by reconciling its ClusterDeployment."""
    if type != "DELETED":
        return
    for owner in _owners(meta, ClusterDeployment.KIND):
        logger.info(f"SplunkToken in {namespace} removed, reconciling ClusterDeployment {owner}")
        await _run(memo, memo.cluster_reconciler, namespace, owner)


@kopf.on.event(
    "v1",
    "secrets",
    labels={MANAGED_BY_LABEL: OPERATOR_NAME},
    when=lambda name, **_: name == TOKEN_SECRET_NAME,
)
async def token_secret_removed(
    type: str, namespace: str, meta: kopf.Meta, memo: kopf.Memo, **_: Any
) -> None:
    """Reconcile the owning SplunkToken when its Secret goes away."""
    if type != "DELETED":
        return
    for owner in _owners(meta, SplunkToken.KIND):
        logger.info(f"Secret {namespace}/{TOKEN_SECRET_NAME} removed, reconciling SplunkToken {owner}")
        await _run(memo, memo.token_reconciler, namespace, owner)


@kopf.on.probe(id="splunk_instance")
def splunk_instance_probe(memo: kopf.Memo, **_: Any) -> str:
    """Report the configured Splunk stack on the liveness endpoint."""
    return memo.splunk_instance


def main() -> None:
    """Run the operator against the whole cluster."""
    kopf.configure(verbose=settings.debug)
    kopf.run(clusterwide=True, liveness_endpoint=settings.liveness_endpoint)


if __name__ == "__main__":
    main()
