"""Tests for the HTTP API client."""

import json

import httpx
import pytest

from billing_bridge.services.api_client import BillingBridgeClient, BillingBridgeClientError


def make_client(handler, api_key=None) -> BillingBridgeClient:
    return BillingBridgeClient(
        "http://bridge.test/",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


class TestBillingBridgeClient:
    """Tests for request building and error mapping."""

    def test_sends_api_key(self):
        seen = {}

        def handler(request):
            seen["key"] = request.headers.get("x-api-key")
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"success": True, "tools": [{"name": "query_invoices"}]})

        with make_client(handler, api_key="secret") as client:
            tools = client.list_tools()

        assert tools == [{"name": "query_invoices"}]
        assert seen == {"key": "secret", "url": "http://bridge.test/api/tools"}

    def test_invoke_body(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "totalSize": 0, "records": []})

        with make_client(handler) as client:
            client.invoke("query_payments", {"status": "Completed"})

        assert seen == {
            "path": "/api/invoke",
            "body": {"tool": "query_payments", "parameters": {"status": "Completed"}},
        }

    def test_execute_tool_defaults_to_empty_object(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        with make_client(handler) as client:
            client.execute_tool("query_accounts")

        assert seen["body"] == {}

    def test_business_failure_is_returned(self):
        def handler(request):
            return httpx.Response(200, json={"success": False, "error": "Tool 'x' not found"})

        with make_client(handler) as client:
            data = client.execute_tool("x", {})

        assert data == {"success": False, "error": "Tool 'x' not found"}

    def test_http_error_raises(self):
        def handler(request):
            return httpx.Response(401, json={"success": False, "error": "Unauthorized: Invalid API key"})

        with make_client(handler) as client:
            with pytest.raises(BillingBridgeClientError) as exc_info:
                client.list_tools()

        assert exc_info.value.status_code == 401
        assert "Unauthorized: Invalid API key" in exc_info.value.message

    def test_non_json_response_raises(self):
        def handler(request):
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        with make_client(handler) as client:
            with pytest.raises(BillingBridgeClientError) as exc_info:
                client.health()

        assert exc_info.value.status_code == 502

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(BillingBridgeClientError) as exc_info:
                client.health()

        assert exc_info.value.status_code is None
        assert "Connection refused" in exc_info.value.message
