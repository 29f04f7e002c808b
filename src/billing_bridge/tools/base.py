"""Base tool class and shared types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from billing_bridge.services.record_store import RecordStore


@dataclass(frozen=True)
class ToolResult:
    """Uniform result envelope returned by every tool.

    Exactly one of the payload fields (``records``/``total_size`` or
    ``summary``) and ``error`` is populated, and ``success`` agrees with
    which one it is.
    """

    success: bool
    records: list[dict[str, Any]] | None = None
    total_size: int | None = None
    summary: dict[str, Any] | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("A successful ToolResult cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("A failed ToolResult must carry an error message")
        if not self.success and (self.records is not None or self.summary is not None):
            raise ValueError("A failed ToolResult cannot carry a payload")

    @classmethod
    def failure(cls, error: str) -> "ToolResult":
        """Build a failed result."""
        return cls(success=False, error=error)

    @classmethod
    def of_records(cls, records: list[dict[str, Any]], total_size: int) -> "ToolResult":
        """Build a successful list result."""
        return cls(success=True, records=records, total_size=total_size)

    @classmethod
    def of_summary(cls, summary: dict[str, Any]) -> "ToolResult":
        """Build a successful aggregate result."""
        return cls(success=True, summary=summary)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase envelope for JSON serialization."""
        result: dict[str, Any] = {"success": self.success}
        if self.total_size is not None:
            result["totalSize"] = self.total_size
        if self.records is not None:
            result["records"] = self.records
        if self.summary is not None:
            result["summary"] = self.summary
        if self.error is not None:
            result["error"] = self.error
        return result


class BaseTool(ABC):
    """Abstract base class for all tools.

    Each tool must define:
    - name: Unique, stable identifier (e.g., "query_invoices")
    - description: Human-readable description for the calling agent
    - input_schema: JSON Schema describing the parameters
    - execute(): Async method that performs the operation

    Schemas are published as-is and are not enforced here.
    """

    name: str
    description: str
    input_schema: dict

    def __init__(self, store: "RecordStore") -> None:
        self.store = store

    @abstractmethod
    async def execute(self, params: dict[str, Any]) -> ToolResult:
        """Execute the tool with given parameters.

        Args:
            params: Tool-specific parameters matching input_schema

        Returns:
            ToolResult envelope. Domain failures are returned, not raised.
        """

    @classmethod
    def get_definition(cls) -> dict:
        """Get the public tool definition, without the handler."""
        return {
            "name": cls.name,
            "description": cls.description,
            "inputSchema": cls.input_schema,
        }
