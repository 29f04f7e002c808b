"""Salesforce record store.

Filtered queries over the billing objects (Invoice__c, Account,
Usage_Record__c, Payment__c), reshaped from Salesforce API names into the
camelCase records returned to callers.
"""

import logging
from typing import Any, Callable, Protocol

from billing_bridge.services.billing_summary import get_billing_summary
from billing_bridge.services.salesforce_session import SalesforceError, SalesforceSession
from billing_bridge.services.soql import SoqlError, SoqlQuery
from billing_bridge.tools.base import ToolResult

logger = logging.getLogger(__name__)

INVOICE_FIELDS = [
    "Id",
    "Name",
    "Invoice_Number__c",
    "Account__c",
    "Account__r.Name",
    "Amount__c",
    "Status__c",
    "Invoice_Date__c",
    "Due_Date__c",
    "CreatedDate",
]

ACCOUNT_FIELDS = [
    "Id",
    "Name",
    "BillingStreet",
    "BillingCity",
    "BillingState",
    "BillingPostalCode",
    "BillingCountry",
    "Phone",
    "Industry",
    "AnnualRevenue",
    "Type",
]

USAGE_RECORD_FIELDS = [
    "Id",
    "Name",
    "Account__c",
    "Account__r.Name",
    "Service_Type__c",
    "Usage_Amount__c",
    "Unit_Price__c",
    "Total_Cost__c",
    "Usage_Date__c",
    "CreatedDate",
]

PAYMENT_FIELDS = [
    "Id",
    "Name",
    "Payment_Number__c",
    "Invoice__c",
    "Invoice__r.Invoice_Number__c",
    "Account__c",
    "Account__r.Name",
    "Amount__c",
    "Payment_Date__c",
    "Payment_Method__c",
    "Status__c",
    "CreatedDate",
]

DEFAULT_LIMIT = 100
DEFAULT_ACCOUNT_LIMIT = 50


class RecordStore(Protocol):
    """Operations the tools rely on."""

    async def query_invoices(self, params: dict[str, Any] | None = None) -> ToolResult: ...

    async def query_accounts(self, params: dict[str, Any] | None = None) -> ToolResult: ...

    async def query_usage_records(self, params: dict[str, Any] | None = None) -> ToolResult: ...

    async def query_payments(self, params: dict[str, Any] | None = None) -> ToolResult: ...


def _related(record: dict[str, Any], relationship: str, field_name: str) -> Any:
    """Read a field off a parent relationship, which may be null."""
    parent = record.get(relationship)
    if not isinstance(parent, dict):
        return None
    return parent.get(field_name)


def map_invoice(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": record.get("Id"),
        "invoiceNumber": record.get("Invoice_Number__c"),
        "accountId": record.get("Account__c"),
        "accountName": _related(record, "Account__r", "Name"),
        "amount": record.get("Amount__c"),
        "status": record.get("Status__c"),
        "invoiceDate": record.get("Invoice_Date__c"),
        "dueDate": record.get("Due_Date__c"),
        "createdDate": record.get("CreatedDate"),
    }


def map_account(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": record.get("Id"),
        "name": record.get("Name"),
        "billingAddress": {
            "street": record.get("BillingStreet"),
            "city": record.get("BillingCity"),
            "state": record.get("BillingState"),
            "postalCode": record.get("BillingPostalCode"),
            "country": record.get("BillingCountry"),
        },
        "phone": record.get("Phone"),
        "industry": record.get("Industry"),
        "annualRevenue": record.get("AnnualRevenue"),
        "type": record.get("Type"),
    }


def map_usage_record(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": record.get("Id"),
        "name": record.get("Name"),
        "accountId": record.get("Account__c"),
        "accountName": _related(record, "Account__r", "Name"),
        "serviceType": record.get("Service_Type__c"),
        "usageAmount": record.get("Usage_Amount__c"),
        "unitPrice": record.get("Unit_Price__c"),
        "totalCost": record.get("Total_Cost__c"),
        "usageDate": record.get("Usage_Date__c"),
        "createdDate": record.get("CreatedDate"),
    }


def map_payment(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": record.get("Id"),
        "paymentNumber": record.get("Payment_Number__c"),
        "invoiceId": record.get("Invoice__c"),
        "invoiceNumber": _related(record, "Invoice__r", "Invoice_Number__c"),
        "accountId": record.get("Account__c"),
        "accountName": _related(record, "Account__r", "Name"),
        "amount": record.get("Amount__c"),
        "paymentDate": record.get("Payment_Date__c"),
        "paymentMethod": record.get("Payment_Method__c"),
        "status": record.get("Status__c"),
        "createdDate": record.get("CreatedDate"),
    }


def build_invoice_query(params: dict[str, Any]) -> SoqlQuery:
    return (
        SoqlQuery("Invoice__c", INVOICE_FIELDS)
        .where_equals("Account__c", params.get("accountId"))
        .where_between("Invoice_Date__c", params.get("startDate"), params.get("endDate"))
        .where_equals("Status__c", params.get("status"))
        .order("Invoice_Date__c", descending=True)
        .take(params.get("limit"), default=DEFAULT_LIMIT)
    )


def build_account_query(params: dict[str, Any]) -> SoqlQuery:
    return (
        SoqlQuery("Account", ACCOUNT_FIELDS)
        .where_equals("Id", params.get("accountId"))
        .where_contains("Name", params.get("accountName"))
        .order("Name")
        .take(params.get("limit"), default=DEFAULT_ACCOUNT_LIMIT)
    )


def build_usage_record_query(params: dict[str, Any]) -> SoqlQuery:
    return (
        SoqlQuery("Usage_Record__c", USAGE_RECORD_FIELDS)
        .where_equals("Account__c", params.get("accountId"))
        .where_between("Usage_Date__c", params.get("startDate"), params.get("endDate"))
        .where_equals("Service_Type__c", params.get("serviceType"))
        .order("Usage_Date__c", descending=True)
        .take(params.get("limit"), default=DEFAULT_LIMIT)
    )


def build_payment_query(params: dict[str, Any]) -> SoqlQuery:
    return (
        SoqlQuery("Payment__c", PAYMENT_FIELDS)
        .where_equals("Account__c", params.get("accountId"))
        .where_equals("Invoice__c", params.get("invoiceId"))
        .where_between("Payment_Date__c", params.get("startDate"), params.get("endDate"))
        .where_equals("Status__c", params.get("status"))
        .order("Payment_Date__c", descending=True)
        .take(params.get("limit"), default=DEFAULT_LIMIT)
    )


class SalesforceRecordStore:
    """Record store backed by a shared SalesforceSession."""

    def __init__(self, session: SalesforceSession, summary_page_size: int = 1000) -> None:
        self.session = session
        self.summary_page_size = summary_page_size

    async def _run(
        self,
        params: dict[str, Any] | None,
        build: Callable[[dict[str, Any]], SoqlQuery],
        mapper: Callable[[dict[str, Any]], dict[str, Any]],
    ) -> ToolResult:
        """Connect, build and run a query, and reshape its records.

        Connection failures propagate; query failures become failed results.
        """
        await self.session.connect()

        try:
            query = build(params or {})
            result = await self.session.query(query.to_soql())
        except (SalesforceError, SoqlError) as e:
            logger.error(f"Query error: [{e.code}] {e.message}")
            return ToolResult.failure(e.message)

        records = [mapper(record) for record in result.get("records", [])]
        return ToolResult.of_records(records, result.get("totalSize", len(records)))

    async def query_invoices(self, params: dict[str, Any] | None = None) -> ToolResult:
        return await self._run(params, build_invoice_query, map_invoice)

    async def query_accounts(self, params: dict[str, Any] | None = None) -> ToolResult:
        return await self._run(params, build_account_query, map_account)

    async def query_usage_records(self, params: dict[str, Any] | None = None) -> ToolResult:
        return await self._run(params, build_usage_record_query, map_usage_record)

    async def query_payments(self, params: dict[str, Any] | None = None) -> ToolResult:
        return await self._run(params, build_payment_query, map_payment)

    async def get_billing_summary(self, params: dict[str, Any] | None = None) -> ToolResult:
        return await get_billing_summary(self, params, page_size=self.summary_page_size)
