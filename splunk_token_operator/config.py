"""Operator configuration management."""

from datetime import timedelta
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

OPERATOR_NAME = "splunk-token-operator"
OPERATOR_NAMESPACE = "openshift-splunk-token-operator"

# API groups
SPLUNKTOKEN_GROUP = "splunktoken.managed.openshift.io"
SPLUNKTOKEN_VERSION = "v1alpha1"
HIVE_GROUP = "hive.openshift.io"
HIVE_VERSION = "v1"

TOKEN_FINALIZER = "splunktoken.managed.openshift.io/finalizer"

# Objects the operator owns inside each cluster namespace
TOKEN_OBJECT_NAME = "cluster"
TOKEN_SECRET_NAME = "splunk-hec-token"
SYNCSET_NAME = "splunk-hec-token"
SECRET_DATA_KEY = "outputs.conf"

# Label on the token Secret
MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"

# ClusterDeployment labels
CLUSTER_ID_LABEL = "api.openshift.com/id"
CLUSTER_TYPE_LABEL = "ext-hypershift.openshift.io/cluster-type"
MANAGEMENT_CLUSTER_TYPE = "management-cluster"


class SplunkIndexes(BaseModel):
    """Default and allowed Splunk indexes for one kind of cluster."""

    model_config = ConfigDict(populate_by_name=True)

    default_index: str = Field(default="", alias="defaultIndex")
    allowed_indexes: list[str] = Field(default_factory=list, alias="allowedIndexes")


class Settings(BaseSettings):
    """Operator settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = "Splunk Token Operator"
    debug: bool = False

    # Splunk Admin Config Service
    splunk_instance: str = ""
    splunk_jwt: str = ""
    acs_hostname: str = "https://admin.splunk.com"
    # HEC endpoints live at https://http-inputs-<instance>.<collector_domain>:443
    collector_domain: str = "splunkcloud.com"

    # Tokens older than this are rotated
    token_max_age: timedelta = timedelta(days=30)

    # Index tables, JSON-encoded in the environment, e.g.
    # CLASSIC_INDEXES='{"defaultIndex": "osd_audit", "allowedIndexes": ["osd_app"]}'
    classic_indexes: SplunkIndexes = Field(default_factory=SplunkIndexes)
    hcp_indexes: SplunkIndexes = Field(default_factory=SplunkIndexes)

    # Where the SyncSet places the token secret on the managed cluster
    forwarder_namespace: str = "openshift-security"
    forwarder_secret_name: str = "splunk-hec-token"

    # Seconds
    request_timeout: float = 30.0
    reconcile_timeout: float = 120.0
    resync_interval: float = 3600.0

    # kopf liveness probe server, e.g. "http://0.0.0.0:8080/healthz"
    liveness_endpoint: str | None = None

    @property
    def collector_uri(self) -> str:
        """HEC collector URI for the configured Splunk stack."""
        return f"https://http-inputs-{self.splunk_instance}.{self.collector_domain}:443"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
