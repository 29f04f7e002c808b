"""Invoices tool - Query invoices by account, date range, or status."""

from typing import Any

from billing_bridge.tools.base import BaseTool, ToolResult


class QueryInvoicesTool(BaseTool):
    """Query Invoice__c records, newest invoice date first."""

    name = "query_invoices"
    description = (
        "Query Salesforce invoices by account, date range, or status. "
        "Returns invoice details including amounts, dates, and status."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "accountId": {
                "type": "string",
                "description": "Salesforce Account ID (18-character ID)",
            },
            "startDate": {
                "type": "string",
                "description": "Start date in YYYY-MM-DD format",
            },
            "endDate": {
                "type": "string",
                "description": "End date in YYYY-MM-DD format",
            },
            "status": {
                "type": "string",
                "description": "Invoice status (e.g., Paid, Pending, Overdue, Draft)",
                "enum": ["Paid", "Pending", "Overdue", "Draft"],
            },
            "limit": {
                "type": "number",
                "description": "Maximum number of records to return (default: 100)",
                "default": 100,
            },
        },
    }

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        return await self.store.query_invoices(params)
