"""CustomResourceDefinition for SplunkToken.

The spec schema is generated from SplunkTokenSpec, so the CRD and the model
cannot drift apart. Run ``python -m splunk_token_operator.crd | kubectl apply -f -``
to install.
"""

import json
from typing import Any

from kubernetes.client import (
    V1CustomResourceDefinition,
    V1CustomResourceDefinitionNames,
    V1CustomResourceDefinitionSpec,
    V1CustomResourceDefinitionVersion,
    V1CustomResourceSubresources,
    V1CustomResourceValidation,
    V1JSONSchemaProps,
    V1ObjectMeta,
)

from splunk_token_operator.config import SPLUNKTOKEN_GROUP, SPLUNKTOKEN_VERSION
from splunk_token_operator.models import SplunkToken, SplunkTokenSpec
from splunk_token_operator.models.meta import deserialize, serialize


def spec_schema() -> V1JSONSchemaProps:
    """OpenAPI schema of the SplunkToken spec, generated from the model."""
    return deserialize(SplunkTokenSpec.model_json_schema(by_alias=True), "V1JSONSchemaProps")


def splunktoken_crd() -> dict[str, Any]:
    """Build the SplunkToken CRD manifest."""
    schema = V1JSONSchemaProps(
        type="object",
        description="SplunkToken is the Schema for the splunktokens API.",
        properties={
            "apiVersion": V1JSONSchemaProps(type="string"),
            "kind": V1JSONSchemaProps(type="string"),
            "metadata": V1JSONSchemaProps(type="object"),
            "spec": spec_schema(),
            "status": V1JSONSchemaProps(
                type="object", x_kubernetes_preserve_unknown_fields=True
            ),
        },
    )
    crd = V1CustomResourceDefinition(
        api_version="apiextensions.k8s.io/v1",
        kind="CustomResourceDefinition",
        metadata=V1ObjectMeta(name=f"{SplunkToken.PLURAL}.{SPLUNKTOKEN_GROUP}"),
        spec=V1CustomResourceDefinitionSpec(
            group=SPLUNKTOKEN_GROUP,
            names=V1CustomResourceDefinitionNames(
                kind=SplunkToken.KIND,
                list_kind=f"{SplunkToken.KIND}List",
                plural=SplunkToken.PLURAL,
                singular=SplunkToken.KIND.lower(),
            ),
            scope="Namespaced",
            versions=[
                V1CustomResourceDefinitionVersion(
                    name=SPLUNKTOKEN_VERSION,
                    served=True,
                    storage=True,
                    schema=V1CustomResourceValidation(open_apiv3_schema=schema),
                    subresources=V1CustomResourceSubresources(status={}),
                )
            ],
        ),
    )
    return serialize(crd)


if __name__ == "__main__":
    print(json.dumps(splunktoken_crd(), indent=2))
