"""Tools router - list and execute tools."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from billing_bridge.dependencies import Dispatcher, Registry, require_api_key
from billing_bridge.schemas.tools import InvokeRequest, ToolDefinition, ToolsListResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Tools"], dependencies=[Depends(require_api_key)])


@router.get("/tools")
async def list_tools(registry: Registry):
    """List available tools with their input schemas, in registration order."""
    return ToolsListResponse(
        tools=[ToolDefinition.model_validate(tool) for tool in registry.list_tools()],
    ).model_dump(by_alias=True)


@router.post("/tools/{tool_name}")
async def execute_tool(
    tool_name: str,
    dispatcher: Dispatcher,
    params: Annotated[Any, Body()] = None,
):
    """Execute a tool with the request body as its parameters.

    Business failures are reported in the body with success=false.
    """
    logger.info(f"Tool invoked: {tool_name}")

    try:
        result = await dispatcher.execute_tool(tool_name, params)
    except Exception as e:
        logger.exception(f"Tool execution error: {tool_name}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e)},
        )

    logger.info(
        f"Tool result: {tool_name} success={result.success} "
        f"recordCount={len(result.records) if result.records else result.total_size or 0}"
    )
    return result.to_dict()


@router.post("/invoke")
async def invoke(
    dispatcher: Dispatcher,
    body: Annotated[InvokeRequest | None, Body()] = None,
):
    """Execute a tool named in the body: {"tool": ..., "parameters": {...}}."""
    if body is None or not body.tool:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Tool name is required"},
        )

    logger.info(f"Generic invoke: {body.tool}")

    try:
        result = await dispatcher.execute_tool(body.tool, body.parameters)
    except Exception as e:
        logger.exception(f"Invoke error: {body.tool}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e)},
        )

    return result.to_dict()
