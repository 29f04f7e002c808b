"""Main CLI entry point for Billing Bridge."""

import json
from typing import Any, Callable

import click

from billing_bridge import __version__
from billing_bridge.config import get_settings
from billing_bridge.output import OutputFormatter
from billing_bridge.services.api_client import BillingBridgeClient, BillingBridgeClientError
from billing_bridge.services.record_store import SalesforceRecordStore
from billing_bridge.services.salesforce_session import SalesforceSession
from billing_bridge.tools.registry import build_registry

DEFAULT_URL = "http://localhost:3000"


def _parse_param(value: str) -> tuple[str, Any]:
    """Parse key=value, decoding the value as JSON when possible."""
    if "=" not in value:
        raise click.BadParameter(f"Expected key=value, got '{value}'")
    key, raw = value.split("=", 1)
    try:
        return key, json.loads(raw)
    except ValueError:
        return key, raw


def _url_option(f: Callable) -> Callable:
    return click.option(
        "--url",
        envvar="BILLING_BRIDGE_URL",
        default=DEFAULT_URL,
        show_default=True,
        help="Base URL of a running server",
    )(f)


def _api_key_option(f: Callable) -> Callable:
    return click.option(
        "--api-key",
        envvar="API_KEY",
        default=None,
        help="Value for the x-api-key header",
    )(f)


@click.group()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.version_option(version=__version__, prog_name="billing-bridge")
@click.pass_context
def cli(ctx: click.Context, output_json: bool) -> None:
    """Billing Bridge - Salesforce billing tools for LLM agents.

    Serve the tool API, inspect the tool catalog, or call a running server.
    Use --json flag for machine-readable output.
    """
    ctx.ensure_object(dict)
    ctx.obj["formatter"] = OutputFormatter(json_mode=output_json)
    ctx.obj["json_mode"] = output_json


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST setting)")
@click.option("--port", type=int, default=None, help="Bind port (default: PORT setting)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP server."""
    from billing_bridge.main import run

    run(host=host, port=port, reload=reload)


@cli.command()
@click.pass_context
def tools(ctx: click.Context) -> None:
    """List the registered tools."""
    formatter: OutputFormatter = ctx.obj["formatter"]
    settings = get_settings()

    # Listing never touches the session, so no login happens here
    store = SalesforceRecordStore(SalesforceSession(settings))
    registry = build_registry(store, summary_page_size=settings.SUMMARY_PAGE_SIZE)
    definitions = registry.list_tools()

    if ctx.obj["json_mode"]:
        formatter.success(definitions, message=f"{len(definitions)} tools available")
        return

    rows = [
        {
            "name": tool["name"],
            "parameters": ", ".join(tool["inputSchema"].get("properties", {})),
            "description": tool["description"],
        }
        for tool in definitions
    ]
    formatter.table(
        rows,
        [("name", "Name"), ("parameters", "Parameters"), ("description", "Description")],
        title="Available tools",
    )


@cli.command()
@click.argument("tool_name")
@click.option("-p", "--param", "params", multiple=True, help="Tool parameter as key=value")
@_url_option
@_api_key_option
@click.pass_context
def invoke(
    ctx: click.Context,
    tool_name: str,
    params: tuple[str, ...],
    url: str,
    api_key: str | None,
) -> None:
    """Invoke a tool on a running server.

    Example: billing-bridge invoke query_accounts -p accountName=Acme -p limit=5
    """
    formatter: OutputFormatter = ctx.obj["formatter"]
    parameters = dict(_parse_param(p) for p in params)

    try:
        with BillingBridgeClient(url, api_key=api_key) as client:
            result = client.invoke(tool_name, parameters)
    except BillingBridgeClientError as e:
        formatter.error(
            code="REQUEST_FAILED",
            message=e.message,
            suggestion="Check the server is running and the API key is correct",
        )
        return

    if not result.get("success"):
        formatter.error(code="TOOL_FAILED", message=result.get("error", "Unknown error"))
        return

    if ctx.obj["json_mode"]:
        formatter.success(result, message=f"{tool_name} succeeded")
    else:
        formatter.console.print_json(data=result)


def _run_check(
    formatter: OutputFormatter,
    name: str,
    check: Callable[[], str],
) -> dict[str, Any]:
    """Run a single smoke check; a raised client error fails it."""
    try:
        detail = check()
        passed = True
    except BillingBridgeClientError as e:
        detail = e.message
        passed = False
    formatter.check(name, passed, detail)
    return {"check": name, "passed": passed, "detail": detail}


@cli.command()
@_url_option
@_api_key_option
@click.option("--account-id", default=None, help="Account ID for the billing summary check")
@click.pass_context
def smoke(ctx: click.Context, url: str, api_key: str | None, account_id: str | None) -> None:
    """Run smoke checks against a running server.

    Tool calls that return success=false still pass (the server answered);
    only transport and HTTP errors fail a check.
    """
    formatter: OutputFormatter = ctx.obj["formatter"]

    with BillingBridgeClient(url, api_key=api_key) as client:

        def check_health() -> str:
            data = client.health()
            return f"{data.get('service')} {data.get('version')} is {data.get('status')}"

        def check_tools() -> str:
            tools_list = client.list_tools()
            return f"{len(tools_list)} tools: " + ", ".join(t["name"] for t in tools_list)

        def check_accounts() -> str:
            data = client.execute_tool("query_accounts", {"accountName": "Acme", "limit": 5})
            if not data.get("success"):
                return f"returned error: {data.get('error')}"
            return f"found {data.get('totalSize')} accounts"

        def check_invoices() -> str:
            data = client.execute_tool(
                "query_invoices",
                {"startDate": "2024-01-01", "endDate": "2024-12-31", "limit": 10},
            )
            if not data.get("success"):
                return f"returned error: {data.get('error')}"
            return f"found {data.get('totalSize')} invoices"

        def check_summary() -> str:
            data = client.execute_tool(
                "get_billing_summary",
                {"accountId": account_id, "startDate": "2024-01-01", "endDate": "2024-12-31"},
            )
            if not data.get("success"):
                return f"returned error: {data.get('error')}"
            summary = data["summary"]
            return (
                f"invoiced {summary['totalInvoiced']}, paid {summary['totalPaid']}, "
                f"outstanding {summary['outstandingBalance']}"
            )

        checks = [
            ("health", check_health),
            ("tools", check_tools),
            ("query_accounts", check_accounts),
            ("query_invoices", check_invoices),
        ]
        if account_id:
            checks.append(("get_billing_summary", check_summary))

        results = [_run_check(formatter, name, check) for name, check in checks]

    passed = sum(1 for r in results if r["passed"])
    total = len(results)

    if passed < total:
        formatter.error(
            code="SMOKE_FAILED",
            message=f"{passed}/{total} checks passed",
            suggestion="Check Salesforce credentials in .env and that the server is running",
            data=results,
        )
        return

    formatter.success(results if ctx.obj["json_mode"] else None, message=f"All {total} checks passed")
