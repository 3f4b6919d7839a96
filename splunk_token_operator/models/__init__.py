"""Typed resources handled by the operator."""

from splunk_token_operator.models.meta import (
    Resource,
    add_finalizer,
    refers_to,
    remove_finalizer,
    set_controller_reference,
    set_owner_reference,
)
from splunk_token_operator.models.splunktoken import SplunkToken, SplunkTokenSpec
from splunk_token_operator.models.hive import ClusterDeployment, SecretMapping, SyncSet
from splunk_token_operator.models.secret import Secret

__all__ = [
    "Resource",
    "add_finalizer",
    "refers_to",
    "remove_finalizer",
    "set_controller_reference",
    "set_owner_reference",
    "SplunkToken",
    "SplunkTokenSpec",
    "ClusterDeployment",
    "SecretMapping",
    "SyncSet",
    "Secret",
]
