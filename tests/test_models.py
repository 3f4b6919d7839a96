"""Tests for resource models and metadata helpers."""

import copy
import unittest
from datetime import datetime, timezone

from kubernetes.client import V1ObjectMeta

from splunk_token_operator.models import (
    ClusterDeployment,
    Secret,
    SecretMapping,
    SplunkToken,
    SplunkTokenSpec,
    SyncSet,
    add_finalizer,
    remove_finalizer,
    set_controller_reference,
    set_owner_reference,
)


class TestSplunkTokenSpec(unittest.TestCase):
    """Tests for SplunkTokenSpec."""

    def test_normalized_appends_missing_default_index(self):
        spec = SplunkTokenSpec(name="a", default_index="d", allowed_indexes=["x"])

        normalized = spec.normalized()

        self.assertEqual(normalized.allowed_indexes, ["x", "d"])
        self.assertEqual(spec.allowed_indexes, ["x"])

    def test_normalized_keeps_present_default_index(self):
        spec = SplunkTokenSpec(name="a", default_index="d", allowed_indexes=["d", "x"])

        self.assertEqual(spec.normalized().allowed_indexes, ["d", "x"])

    def test_normalized_without_default_index(self):
        spec = SplunkTokenSpec(name="a", allowed_indexes=["x"])

        self.assertEqual(spec.normalized().allowed_indexes, ["x"])

    def test_to_dict_omits_empty_fields(self):
        self.assertEqual(SplunkTokenSpec(name="bar").to_dict(), {"name": "bar"})

    def test_accepts_camel_case(self):
        spec = SplunkTokenSpec.model_validate(
            {"name": "a", "defaultIndex": "d", "allowedIndexes": ["d"]}
        )

        self.assertEqual(spec.default_index, "d")
        self.assertEqual(spec.allowed_indexes, ["d"])


class TestResourceConversion(unittest.TestCase):
    """Tests for converting resources to and from their JSON form."""

    def test_splunk_token_round_trip(self):
        data = {
            "apiVersion": "splunktoken.managed.openshift.io/v1alpha1",
            "kind": "SplunkToken",
            "metadata": {
                "name": "cluster",
                "namespace": "ns",
                "uid": "u1",
                "resourceVersion": "3",
                "creationTimestamp": "2025-03-04T05:06:07Z",
                "finalizers": ["f"],
                "ownerReferences": [
                    {
                        "apiVersion": "hive.openshift.io/v1",
                        "kind": "ClusterDeployment",
                        "name": "cd",
                        "uid": "u0",
                    }
                ],
            },
            "spec": {"name": "id", "defaultIndex": "d", "allowedIndexes": ["d"]},
        }

        token = SplunkToken.from_dict(data)

        self.assertEqual(token.metadata.owner_references[0].kind, "ClusterDeployment")
        self.assertEqual(
            token.metadata.creation_timestamp,
            datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc),
        )
        expected = copy.deepcopy(data)
        expected["metadata"]["creationTimestamp"] = "2025-03-04T05:06:07+00:00"
        self.assertEqual(token.to_dict(), expected)

    def test_secret_data_is_base64_on_the_wire(self):
        secret = Secret(
            metadata=V1ObjectMeta(name="s", namespace="ns"),
            data={"outputs.conf": b"[httpout]"},
            immutable=True,
        )

        data = secret.to_dict()

        self.assertEqual(data["data"], {"outputs.conf": "W2h0dHBvdXRd"})
        self.assertEqual(data["type"], "Opaque")
        self.assertTrue(data["immutable"])
        self.assertEqual(Secret.from_dict(data).data, {"outputs.conf": b"[httpout]"})

    def test_syncset_spec(self):
        syncset = SyncSet(
            metadata=V1ObjectMeta(name="splunk-hec-token", namespace="ns"),
            cluster_deployment_refs=["cd"],
            secret_mappings=[
                SecretMapping(
                    source_name="splunk-hec-token",
                    source_namespace="ns",
                    target_name="splunk-auth",
                    target_namespace="openshift-security",
                )
            ],
        )

        spec = syncset.to_dict()["spec"]

        self.assertEqual(spec["clusterDeploymentRefs"], [{"name": "cd"}])
        self.assertEqual(spec["resourceApplyMode"], "Sync")
        self.assertEqual(
            spec["secretMappings"][0]["targetRef"],
            {"name": "splunk-auth", "namespace": "openshift-security"},
        )
        self.assertEqual(SyncSet.from_dict(syncset.to_dict()), syncset)

    def test_metadata_fields_survive_round_trip(self):
        data = {
            "apiVersion": "splunktoken.managed.openshift.io/v1alpha1",
            "kind": "SplunkToken",
            "metadata": {
                "name": "cluster",
                "namespace": "ns",
                "resourceVersion": "3",
                "annotations": {"kopf.zalando.org/last-handled-configuration": "{}"},
                "generation": 2,
            },
            "spec": {"name": "id"},
        }

        metadata = SplunkToken.from_dict(data).to_dict()["metadata"]

        self.assertEqual(
            metadata["annotations"],
            {"kopf.zalando.org/last-handled-configuration": "{}"},
        )
        self.assertEqual(metadata["generation"], 2)


class TestMetadataHelpers(unittest.TestCase):
    """Tests for finalizer and owner reference helpers."""

    def token(self) -> SplunkToken:
        return SplunkToken(metadata=V1ObjectMeta(name="cluster", namespace="ns", uid="t1"))

    def cluster(self, name: str = "cd") -> ClusterDeployment:
        return ClusterDeployment(metadata=V1ObjectMeta(name=name, namespace="ns", uid=name))

    def test_finalizers_report_changes(self):
        token = self.token()

        self.assertTrue(add_finalizer(token, "f"))
        self.assertFalse(add_finalizer(token, "f"))
        self.assertEqual(token.metadata.finalizers, ["f"])
        self.assertTrue(remove_finalizer(token, "f"))
        self.assertFalse(remove_finalizer(token, "f"))
        self.assertEqual(token.metadata.finalizers, [])

    def test_owner_reference_is_refreshed_not_duplicated(self):
        token = self.token()
        cluster = self.cluster()

        set_owner_reference(cluster, token)
        cluster.metadata.uid = "new-uid"
        set_owner_reference(cluster, token)

        self.assertEqual(len(token.metadata.owner_references), 1)
        self.assertEqual(token.metadata.owner_references[0].uid, "new-uid")
        self.assertIsNone(token.metadata.owner_references[0].controller)

    def test_controller_reference(self):
        secret = Secret(metadata=V1ObjectMeta(name="s", namespace="ns"))

        set_controller_reference(self.token(), secret)

        ref = secret.metadata.owner_references[0]
        self.assertEqual(ref.kind, "SplunkToken")
        self.assertEqual(ref.uid, "t1")
        self.assertTrue(ref.controller)
        self.assertTrue(ref.block_owner_deletion)

    def test_controller_reference_conflict(self):
        token = self.token()
        set_controller_reference(self.cluster("first"), token)

        with self.assertRaises(ValueError):
            set_controller_reference(self.cluster("second"), token)
