"""Payments tool - Query payments by account, invoice, or date range."""

from typing import Any

from billing_bridge.tools.base import BaseTool, ToolResult


class QueryPaymentsTool(BaseTool):
    """Query Payment__c records, newest payment date first."""

    name = "query_payments"
    description = (
        "Query payment records by account, invoice, or date range. "
        "Returns payment details including amounts, methods, and status."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "accountId": {
                "type": "string",
                "description": "Salesforce Account ID",
            },
            "invoiceId": {
                "type": "string",
                "description": "Salesforce Invoice ID",
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
                "description": "Payment status",
                "enum": ["Completed", "Pending", "Failed", "Refunded"],
            },
            "limit": {
                "type": "number",
                "description": "Maximum number of records to return (default: 100)",
                "default": 100,
            },
        },
    }

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        return await self.store.query_payments(params)
