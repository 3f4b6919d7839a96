"""Core v1 Secret."""

import base64
from dataclasses import dataclass, field
from typing import Any

from kubernetes.client import V1Secret

from splunk_token_operator.models.meta import Resource, deserialize, serialize


@dataclass
class Secret(Resource):
    """Opaque secret. Data values are raw bytes; V1Secret carries them base64-encoded."""

    API_VERSION = "v1"
    KIND = "Secret"
    PLURAL = "secrets"

    data: dict[str, bytes] = field(default_factory=dict)
    immutable: bool | None = None
    type: str = "Opaque"

    def to_dict(self) -> dict[str, Any]:
        return serialize(
            V1Secret(
                api_version=self.API_VERSION,
                kind=self.KIND,
                metadata=self.metadata,
                data={
                    key: base64.b64encode(value).decode("ascii")
                    for key, value in self.data.items()
                },
                immutable=self.immutable,
                type=self.type,
            )
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Secret":
        secret: V1Secret = deserialize(data, "V1Secret")
        return cls(
            metadata=secret.metadata,
            data={
                key: base64.b64decode(value)
                for key, value in (secret.data or {}).items()
            },
            immutable=secret.immutable,
            type=secret.type or "Opaque",
        )
