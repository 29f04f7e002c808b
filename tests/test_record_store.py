"""Tests for the Salesforce record store."""

import asyncio

import pytest
from simple_salesforce import exceptions as sf_exceptions

from billing_bridge.services.record_store import (
    SalesforceRecordStore,
    build_account_query,
    build_invoice_query,
    build_payment_query,
    build_usage_record_query,
    map_account,
    map_invoice,
    map_payment,
)
from billing_bridge.services.salesforce_session import SalesforceAuthError
from billing_bridge.tools.dispatcher import ToolDispatcher
from billing_bridge.tools.registry import build_registry
from tests.fakes import invalid_login, rest_error

INVOICE_RECORD = {
    "attributes": {"type": "Invoice__c"},
    "Id": "a01000000000001",
    "Name": "INV-0001",
    "Invoice_Number__c": "INV-0001",
    "Account__c": "001A",
    "Account__r": {"attributes": {"type": "Account"}, "Name": "Acme Corp"},
    "Amount__c": 1200.5,
    "Status__c": "Paid",
    "Invoice_Date__c": "2024-03-01",
    "Due_Date__c": "2024-03-31",
    "CreatedDate": "2024-03-01T10:00:00.000+0000",
}


class TestMappers:
    """Tests for record reshaping."""

    def test_map_invoice(self):
        assert map_invoice(INVOICE_RECORD) == {
            "id": "a01000000000001",
            "invoiceNumber": "INV-0001",
            "accountId": "001A",
            "accountName": "Acme Corp",
            "amount": 1200.5,
            "status": "Paid",
            "invoiceDate": "2024-03-01",
            "dueDate": "2024-03-31",
            "createdDate": "2024-03-01T10:00:00.000+0000",
        }

    def test_null_relationship(self):
        record = dict(INVOICE_RECORD, Account__r=None)

        assert map_invoice(record)["accountName"] is None

    def test_map_account_nests_billing_address(self):
        mapped = map_account(
            {
                "Id": "001A",
                "Name": "Acme Corp",
                "BillingStreet": "1 Main St",
                "BillingCity": "Springfield",
                "BillingState": "IL",
                "BillingPostalCode": "62701",
                "BillingCountry": "USA",
                "Industry": "Manufacturing",
            }
        )

        assert mapped["billingAddress"] == {
            "street": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "postalCode": "62701",
            "country": "USA",
        }
        assert mapped["phone"] is None
        assert mapped["industry"] == "Manufacturing"

    def test_map_payment_reads_invoice_number(self):
        mapped = map_payment(
            {
                "Id": "a02",
                "Invoice__c": "a01",
                "Invoice__r": {"Invoice_Number__c": "INV-0001"},
                "Amount__c": 80,
            }
        )

        assert mapped["invoiceId"] == "a01"
        assert mapped["invoiceNumber"] == "INV-0001"
        assert mapped["amount"] == 80


class TestQueryBuilders:
    """Tests for per-object filters and defaults."""

    def test_invoice_defaults(self):
        soql = build_invoice_query({}).to_soql()

        assert soql.startswith("SELECT Id, Name, Invoice_Number__c")
        assert soql.endswith("FROM Invoice__c ORDER BY Invoice_Date__c DESC LIMIT 100")

    def test_invoice_filters(self):
        soql = build_invoice_query(
            {"accountId": "001A", "startDate": "2024-01-01", "endDate": "2024-12-31", "status": "Overdue", "limit": 5}
        ).to_soql()

        assert (
            "WHERE Account__c = '001A' AND Invoice_Date__c >= 2024-01-01 "
            "AND Invoice_Date__c <= 2024-12-31 AND Status__c = 'Overdue'"
        ) in soql
        assert soql.endswith("LIMIT 5")

    def test_explicit_null_limit_uses_default(self):
        assert build_invoice_query({"limit": None}).limit == 100

    def test_account_defaults(self):
        soql = build_account_query({"accountName": "Acme"}).to_soql()

        assert "FROM Account WHERE Name LIKE '%Acme%' ORDER BY Name ASC LIMIT 50" in soql

    def test_usage_filters(self):
        soql = build_usage_record_query({"serviceType": "API Calls"}).to_soql()

        assert "WHERE Service_Type__c = 'API Calls' ORDER BY Usage_Date__c DESC LIMIT 100" in soql

    def test_payment_filters(self):
        soql = build_payment_query({"invoiceId": "a01", "status": "Completed"}).to_soql()

        assert "WHERE Invoice__c = 'a01' AND Status__c = 'Completed'" in soql
        assert "ORDER BY Payment_Date__c DESC" in soql

    def test_caller_value_cannot_break_out(self):
        soql = build_account_query({"accountId": "001' OR Name LIKE '%"}).to_soql()

        assert "WHERE Id = '001\\' OR Name LIKE \\'%'" in soql


@pytest.fixture
def sf_store(sf_session):
    return SalesforceRecordStore(sf_session)


class TestSalesforceRecordStore:
    """Tests against a fake Salesforce."""

    @pytest.mark.asyncio
    async def test_query_invoices(self, sf_store, salesforce):
        salesforce.query_result = {"totalSize": 1, "done": True, "records": [INVOICE_RECORD]}

        result = await sf_store.query_invoices({"accountId": "001A"})

        assert result.success is True
        assert result.total_size == 1
        assert result.records[0]["invoiceNumber"] == "INV-0001"
        assert salesforce.logins == 1
        assert "Account__c = '001A'" in salesforce.queries[0]

    @pytest.mark.asyncio
    async def test_total_size_comes_from_remote(self, sf_store, salesforce):
        salesforce.query_result = {"totalSize": 2500, "done": False, "records": [INVOICE_RECORD]}

        result = await sf_store.query_invoices({})

        assert result.total_size == 2500
        assert len(result.records) == 1

    @pytest.mark.asyncio
    async def test_session_is_shared_across_queries(self, sf_store, salesforce):
        await sf_store.query_accounts({})
        await sf_store.query_payments({})
        await sf_store.query_usage_records({})

        assert salesforce.logins == 1
        assert len(salesforce.queries) == 3

    @pytest.mark.asyncio
    async def test_query_rejection_becomes_failure(self, sf_store, salesforce):
        salesforce.query_error = rest_error(
            sf_exceptions.SalesforceMalformedRequest,
            400,
            "INVALID_TYPE",
            "sObject type 'Invoice__c' is not supported.",
        )

        result = await sf_store.query_invoices({})

        assert result.to_dict() == {
            "success": False,
            "error": "sObject type 'Invoice__c' is not supported.",
        }

    @pytest.mark.asyncio
    async def test_invalid_date_fails_without_query(self, sf_store, salesforce):
        result = await sf_store.query_payments({"startDate": "01/02/2024"})

        assert result.success is False
        assert "expected YYYY-MM-DD format" in result.error
        assert salesforce.queries == []

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(self, sf_store, salesforce):
        salesforce.login_error = invalid_login()

        with pytest.raises(SalesforceAuthError):
            await sf_store.query_accounts({})

    @pytest.mark.asyncio
    async def test_connect_failure_through_dispatcher(self, sf_store, salesforce):
        """The dispatcher reports a login failure as the tool's error."""
        salesforce.login_error = invalid_login()
        dispatcher = ToolDispatcher(build_registry(sf_store))

        result = await dispatcher.execute_tool("query_accounts", {})

        assert result.success is False
        assert result.error.startswith("Failed to connect to Salesforce: INVALID_LOGIN")


class TestBillingSummaryAgainstSalesforce:
    """Summary fan-out over a real session and store."""

    @pytest.mark.asyncio
    async def test_summary_shares_one_login(self, sf_store, salesforce):
        result = await sf_store.get_billing_summary({"accountId": "001A", "startDate": "2024-01-01"})

        assert result.success is True
        assert result.summary["invoiceCount"] == 0
        assert salesforce.logins == 1
        assert len(salesforce.queries) == 3
        assert all("LIMIT 1000" in q for q in salesforce.queries)

    @pytest.mark.asyncio
    async def test_failed_login_is_attempted_once(self, sf_store, salesforce):
        """A failing login fails the summary without stray retries."""
        salesforce.login_delay = 0.01
        salesforce.login_error = invalid_login()

        result = await sf_store.get_billing_summary({"accountId": "001A"})

        assert result.success is False
        assert result.error.startswith("Failed to connect to Salesforce: INVALID_LOGIN")
        assert salesforce.logins == 1
        assert salesforce.queries == []
        assert asyncio.all_tasks() == {asyncio.current_task()}

        # Nothing left to log in after the call returned
        await asyncio.sleep(0.05)
        assert salesforce.logins == 1
