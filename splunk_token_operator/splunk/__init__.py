"""Splunk HEC token management."""

from splunk_token_operator.splunk.interfaces import HECToken, TokenManager
from splunk_token_operator.splunk.client import (
    ConfigurationError,
    DecodeError,
    SplunkAPIError,
    SplunkClient,
    TransportError,
)

__all__ = [
    "HECToken",
    "TokenManager",
    "ConfigurationError",
    "DecodeError",
    "SplunkAPIError",
    "SplunkClient",
    "TransportError",
]
