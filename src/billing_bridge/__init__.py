"""Billing Bridge - tool-invocation facade over Salesforce billing records."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("billing-bridge")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
