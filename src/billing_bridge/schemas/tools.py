"""Tool-related schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolDefinition(BaseModel):
    """Definition of an available tool."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")


class ToolsListResponse(BaseModel):
    """Response for listing available tools."""

    success: bool = True
    tools: list[ToolDefinition]


class InvokeRequest(BaseModel):
    """Body of the generic invoke endpoint."""

    model_config = ConfigDict(extra="allow")

    tool: str | None = None
    parameters: Any = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    timestamp: datetime
