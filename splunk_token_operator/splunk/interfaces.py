"""Abstract interface for HEC token management."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from splunk_token_operator.models import SplunkTokenSpec


class HECToken(BaseModel):
    """A HEC token: its spec plus the secret value Splunk generated for it."""

    model_config = ConfigDict(populate_by_name=True)

    spec: SplunkTokenSpec = Field(default_factory=SplunkTokenSpec)
    value: str = Field(default="", alias="token")


class TokenManager(ABC):
    """Create, read and delete HEC tokens on a Splunk instance."""

    @abstractmethod
    async def create_token(self, token: HECToken) -> HECToken:
        """Create a token. Returns the token with its value filled in."""
        ...

    @abstractmethod
    async def read_token(self, name: str) -> HECToken:
        """Fetch a token by name."""
        ...

    @abstractmethod
    async def delete_token(self, name: str) -> None:
        """Delete a token. Deleting a missing token is not an error."""
        ...
