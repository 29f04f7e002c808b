"""Request and response schemas."""

from billing_bridge.schemas.tools import (
    HealthResponse,
    InvokeRequest,
    ToolDefinition,
    ToolsListResponse,
)

__all__ = [
    "HealthResponse",
    "InvokeRequest",
    "ToolDefinition",
    "ToolsListResponse",
]
