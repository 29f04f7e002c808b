"""Accounts tool - Search accounts by name or ID."""

from typing import Any

from billing_bridge.tools.base import BaseTool, ToolResult


class QueryAccountsTool(BaseTool):
    """Search Account records, ordered by name.

    accountName is a partial match; accountId is exact.
    """

    name = "query_accounts"
    description = (
        "Search for Salesforce accounts by name or ID. "
        "Returns account details including billing address and contact information."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "accountName": {
                "type": "string",
                "description": "Account name to search for (partial match supported)",
            },
            "accountId": {
                "type": "string",
                "description": "Specific Salesforce Account ID",
            },
            "limit": {
                "type": "number",
                "description": "Maximum number of records to return (default: 50)",
                "default": 50,
            },
        },
    }

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        return await self.store.query_accounts(params)
