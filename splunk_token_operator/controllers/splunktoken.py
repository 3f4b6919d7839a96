"""Reconciler that keeps a SplunkToken, its HEC token and its Secret in sync."""

import logging
from datetime import datetime, timezone
from typing import Callable

from kubernetes.client import V1ObjectMeta

from splunk_token_operator.config import (
    MANAGED_BY_LABEL,
    OPERATOR_NAME,
    SECRET_DATA_KEY,
    TOKEN_FINALIZER,
    TOKEN_SECRET_NAME,
    Settings,
    get_settings,
)
from splunk_token_operator.models import (
    Secret,
    SplunkToken,
    add_finalizer,
    remove_finalizer,
    set_controller_reference,
)
from splunk_token_operator.splunk import HECToken, TokenManager
from splunk_token_operator.store import NotFoundError, ResourceStore

logger = logging.getLogger(__name__)

OUTPUTS_CONF = """[httpout]
httpEventCollectorToken = {token}
uri = {uri}"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SplunkTokenReconciler:
    """Reconciles a SplunkToken object.

    Each call to reconcile is one idempotent pass:

    - If the SplunkToken no longer exists there is nothing to do.
    - If it has a deletion timestamp, the HEC token is deleted from Splunk and
      the finalizer is removed so the object can go away.
    - If it is older than the configured maximum age, the SplunkToken itself
      is deleted so that a fresh one (and a fresh HEC token) replaces it. The
      HEC token is torn down on the pass that observes the deletion.
    - If there is no Secret for the token, a HEC token is created on Splunk
      and its value stored in a new, immutable Secret owned by the SplunkToken.
    """

    def __init__(
        self,
        store: ResourceStore,
        splunk_api: TokenManager,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.splunk_api = splunk_api
        self.settings = settings or get_settings()
        self.clock = clock

    async def reconcile(self, namespace: str, name: str) -> None:
        logger.info(f"Reconciling SplunkToken {namespace}/{name}")

        try:
            token = await self.store.get(SplunkToken, namespace, name)
        except NotFoundError:
            logger.info(f"SplunkToken {namespace}/{name} not found")
            return

        if token.metadata.deletion_timestamp is not None:
            await self._finalize(token)
            return

        if self._is_stale(token):
            logger.info(f"SplunkToken {namespace}/{name} is stale, rotating")
            await self.store.delete(token)
            return

        try:
            await self.store.get(Secret, namespace, TOKEN_SECRET_NAME)
        except NotFoundError:
            logger.info(
                f"Secret {namespace}/{TOKEN_SECRET_NAME} not found, "
                "requesting new token from Splunk"
            )
            await self._create_token_secret(token)

    async def _finalize(self, token: SplunkToken) -> None:
        logger.info(
            f"SplunkToken {token.namespace}/{token.name} has deletion timestamp, "
            f"deleting HEC token {token.spec.name} from Splunk"
        )
        await self.splunk_api.delete_token(token.spec.name)
        if remove_finalizer(token, TOKEN_FINALIZER):
            await self.store.update(token)
            logger.info(f"Finalizer removed from SplunkToken {token.namespace}/{token.name}")

    def _is_stale(self, token: SplunkToken) -> bool:
        created = token.metadata.creation_timestamp
        if created is None:
            return False
        return self.clock() > created + self.settings.token_max_age

    async def _create_token_secret(self, token: SplunkToken) -> None:
        # Finalizer must be stored before the HEC token exists.
        if add_finalizer(token, TOKEN_FINALIZER):
            token = await self.store.update(token)
            logger.info(f"Finalizer added to SplunkToken {token.namespace}/{token.name}")

        hec_token = await self.splunk_api.create_token(HECToken(spec=token.spec))

        secret = self.new_secret(token.namespace, hec_token.value)
        set_controller_reference(token, secret)
        await self.store.create(secret)
        logger.info(f"Created Secret {token.namespace}/{TOKEN_SECRET_NAME}")

    def new_secret(self, namespace: str, token_value: str) -> Secret:
        """Build the immutable Secret carrying an outputs.conf for the token."""
        outputs_conf = OUTPUTS_CONF.format(
            token=token_value, uri=self.settings.collector_uri
        )
        return Secret(
            metadata=V1ObjectMeta(
                name=TOKEN_SECRET_NAME,
                namespace=namespace,
                labels={MANAGED_BY_LABEL: OPERATOR_NAME},
            ),
            data={SECRET_DATA_KEY: outputs_conf.encode("utf-8")},
            immutable=True,
        )
