"""Billing summary aggregation.

Fans out three independent queries (invoices, payments, usage records) for
one account and folds their amounts into a single summary.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Iterable

from billing_bridge.services.salesforce_session import SalesforceError
from billing_bridge.tools.base import ToolResult

if TYPE_CHECKING:
    from billing_bridge.services.record_store import RecordStore

logger = logging.getLogger(__name__)

SUMMARY_PAGE_SIZE = 1000


def _sum_field(records: Iterable[dict[str, Any]] | None, field_name: str) -> float:
    """Sum a numeric field, treating missing or null values as 0."""
    return sum((record.get(field_name) or 0) for record in records or [])


def _count(result: ToolResult, label: str) -> int:
    """Reported total for a sub-query, falling back to 0.

    The total comes from the remote count, so it can exceed the number of
    records actually summed when a page is truncated.
    """
    total = result.total_size or 0
    fetched = len(result.records or [])
    if total > fetched:
        logger.warning(f"Billing summary {label}: {total} reported but only {fetched} summed")
    return total


def summarize(
    account_id: str,
    start_date: str | None,
    end_date: str | None,
    invoices: ToolResult,
    payments: ToolResult,
    usage: ToolResult,
) -> dict[str, Any]:
    """Fold three query results into a billing summary.

    A failed sub-query contributes no records and a count of 0.
    """
    total_invoiced = _sum_field(invoices.records, "amount")
    total_paid = _sum_field(payments.records, "amount")
    total_usage = _sum_field(usage.records, "totalCost")

    return {
        "accountId": account_id,
        "period": {"startDate": start_date, "endDate": end_date},
        "totalInvoiced": total_invoiced,
        "totalPaid": total_paid,
        "outstandingBalance": total_invoiced - total_paid,
        "totalUsage": total_usage,
        "invoiceCount": _count(invoices, "invoices"),
        "paymentCount": _count(payments, "payments"),
        "usageRecordCount": _count(usage, "usage records"),
    }


async def get_billing_summary(
    store: "RecordStore",
    params: dict[str, Any] | None = None,
    page_size: int = SUMMARY_PAGE_SIZE,
) -> ToolResult:
    """Build the billing summary for an account.

    Args:
        store: Record store to query
        params: accountId (required), startDate, endDate
        page_size: Per-query record cap

    Returns:
        ToolResult with a summary, or a failure when accountId is missing
    """
    params = params or {}
    account_id = params.get("accountId")
    start_date = params.get("startDate")
    end_date = params.get("endDate")

    if not account_id:
        return ToolResult.failure("Account ID is required for billing summary")

    scope = {
        "accountId": account_id,
        "startDate": start_date,
        "endDate": end_date,
        "limit": page_size,
    }

    # Wait for all three so none outlives the request
    outcomes = await asyncio.gather(
        store.query_invoices(dict(scope)),
        store.query_payments(dict(scope)),
        store.query_usage_records(dict(scope)),
        return_exceptions=True,
    )

    for outcome in outcomes:
        if isinstance(outcome, BaseException) and not isinstance(outcome, SalesforceError):
            raise outcome
    for outcome in outcomes:
        if isinstance(outcome, SalesforceError):
            logger.error(f"Summary error: {outcome.message}")
            return ToolResult.failure(outcome.message)

    invoices, payments, usage = outcomes

    for label, result in (("invoices", invoices), ("payments", payments), ("usage", usage)):
        if not result.success:
            logger.warning(f"Billing summary {label} query failed for {account_id}: {result.error}")

    return ToolResult.of_summary(
        summarize(account_id, start_date, end_date, invoices, payments, usage)
    )
