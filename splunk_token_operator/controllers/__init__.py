"""Reconcilers."""

from splunk_token_operator.controllers.clusterdeployment import (
    ClusterDeploymentReconciler,
    LabelMissingError,
)
from splunk_token_operator.controllers.splunktoken import SplunkTokenReconciler

__all__ = [
    "ClusterDeploymentReconciler",
    "LabelMissingError",
    "SplunkTokenReconciler",
]
