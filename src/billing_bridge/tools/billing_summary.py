"""Billing summary tool - Totals and counts for one account."""

from typing import TYPE_CHECKING, Any

from billing_bridge.services.billing_summary import SUMMARY_PAGE_SIZE, get_billing_summary
from billing_bridge.tools.base import BaseTool, ToolResult

if TYPE_CHECKING:
    from billing_bridge.services.record_store import RecordStore


class BillingSummaryTool(BaseTool):
    """Aggregate invoices, payments and usage for an account.

    Runs the three queries concurrently and reports total invoiced, total
    paid, outstanding balance, total usage cost and record counts.
    """

    name = "get_billing_summary"
    description = (
        "Get comprehensive billing summary for an account including total invoiced, "
        "paid, outstanding balance, and usage statistics."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "accountId": {
                "type": "string",
                "description": "Salesforce Account ID (required)",
                "required": True,
            },
            "startDate": {
                "type": "string",
                "description": "Start date in YYYY-MM-DD format",
            },
            "endDate": {
                "type": "string",
                "description": "End date in YYYY-MM-DD format",
            },
        },
        "required": ["accountId"],
    }

    def __init__(self, store: "RecordStore", page_size: int = SUMMARY_PAGE_SIZE) -> None:
        super().__init__(store)
        self.page_size = page_size

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        return await get_billing_summary(self.store, params, page_size=self.page_size)
