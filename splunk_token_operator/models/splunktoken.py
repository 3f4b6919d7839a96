"""SplunkToken custom resource."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from splunk_token_operator.config import SPLUNKTOKEN_GROUP, SPLUNKTOKEN_VERSION
from splunk_token_operator.models.meta import Resource


class SplunkTokenSpec(BaseModel):
    """Desired HEC token: its name and the indexes it may write to."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"required": ["name"]},
    )

    name: str = Field(default="", description="Name of the HEC token on the Splunk instance.")
    default_index: str = Field(
        default="",
        alias="defaultIndex",
        description="Index events are written to when none is given.",
    )
    allowed_indexes: list[str] = Field(
        default_factory=list,
        alias="allowedIndexes",
        description="Indexes the token may write to.",
        json_schema_extra={"x-kubernetes-list-type": "set"},
    )

    @field_validator("allowed_indexes", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def normalized(self) -> "SplunkTokenSpec":
        """Return a copy whose allowed indexes include the default index.

        The default index is appended once if missing; existing order is kept.
        """
        allowed = list(self.allowed_indexes)
        if self.default_index and self.default_index not in allowed:
            allowed.append(self.default_index)
        return self.model_copy(update={"allowed_indexes": allowed})

    def to_dict(self) -> dict[str, Any]:
        """Camel-cased dict with empty optional fields left out."""
        return self.model_dump(by_alias=True, exclude_defaults=True)


@dataclass
class SplunkToken(Resource):
    """Per-cluster record describing the HEC token the operator maintains."""

    API_VERSION = f"{SPLUNKTOKEN_GROUP}/{SPLUNKTOKEN_VERSION}"
    KIND = "SplunkToken"
    PLURAL = "splunktokens"

    spec: SplunkTokenSpec = field(default_factory=SplunkTokenSpec)

    def _body_to_dict(self) -> dict[str, Any]:
        return {"spec": self.spec.to_dict()}

    @classmethod
    def _body_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {"spec": SplunkTokenSpec.model_validate(data.get("spec") or {})}
