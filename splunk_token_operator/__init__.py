"""Provisions and rotates Splunk HEC tokens for managed clusters."""

__version__ = "0.1.0"
