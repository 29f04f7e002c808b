"""Tool registry.

The catalog of invocable tools, in registration order. Built once at
startup and never mutated afterwards.
"""

import copy
from typing import TYPE_CHECKING, Iterable, Iterator

from billing_bridge.services.billing_summary import SUMMARY_PAGE_SIZE
from billing_bridge.tools.accounts import QueryAccountsTool
from billing_bridge.tools.base import BaseTool
from billing_bridge.tools.billing_summary import BillingSummaryTool
from billing_bridge.tools.invoices import QueryInvoicesTool
from billing_bridge.tools.payments import QueryPaymentsTool
from billing_bridge.tools.usage_records import QueryUsageRecordsTool

if TYPE_CHECKING:
    from billing_bridge.services.record_store import RecordStore


class ToolRegistry:
    """Ordered, read-only collection of tools."""

    def __init__(self, tools: Iterable[BaseTool]) -> None:
        self._tools: tuple[BaseTool, ...] = tuple(tools)

        seen: set[str] = set()
        for tool in self._tools:
            if tool.name in seen:
                raise ValueError(f"Duplicate tool name: '{tool.name}'")
            seen.add(tool.name)

    def list_tools(self) -> list[dict]:
        """Public catalog without handlers, in registration order.

        Returns copies, so callers cannot alter the registered schemas.
        """
        return [copy.deepcopy(tool.get_definition()) for tool in self._tools]

    def find(self, name: str) -> BaseTool | None:
        """Exact, case-sensitive lookup by name."""
        for tool in self._tools:
            if tool.name == name:
                return tool
        return None

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)


def build_registry(store: "RecordStore", summary_page_size: int = SUMMARY_PAGE_SIZE) -> ToolRegistry:
    """Register the billing tools against a record store."""
    return ToolRegistry([
        QueryInvoicesTool(store),
        QueryAccountsTool(store),
        QueryUsageRecordsTool(store),
        QueryPaymentsTool(store),
        BillingSummaryTool(store, page_size=summary_page_size),
    ])
