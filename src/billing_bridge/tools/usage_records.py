"""Usage records tool - Query AI service usage by account, date range, or service type."""

from typing import Any

from billing_bridge.tools.base import BaseTool, ToolResult


class QueryUsageRecordsTool(BaseTool):
    """Query Usage_Record__c records, newest usage date first."""

    name = "query_usage_records"
    description = (
        "Query AI service usage records by account, date range, or service type. "
        "Returns usage amounts, costs, and service details."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "accountId": {
                "type": "string",
                "description": "Salesforce Account ID",
            },
            "startDate": {
                "type": "string",
                "description": "Start date in YYYY-MM-DD format",
            },
            "endDate": {
                "type": "string",
                "description": "End date in YYYY-MM-DD format",
            },
            "serviceType": {
                "type": "string",
                "description": "Type of AI service (e.g., GPT-4, Claude, Embeddings)",
                "enum": ["GPT-4", "GPT-3.5", "Claude", "Embeddings", "Fine-tuning", "Other"],
            },
            "limit": {
                "type": "number",
                "description": "Maximum number of records to return (default: 100)",
                "default": 100,
            },
        },
    }

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        return await self.store.query_usage_records(params)
