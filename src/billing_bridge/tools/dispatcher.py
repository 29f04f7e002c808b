"""Tool dispatcher.

Executes one named tool and always returns a ToolResult: unknown tools,
invalid parameters and unexpected faults all come back as failed results.
"""

import copy
import logging
from collections.abc import Mapping
from typing import Any

from jsonschema import Draft7Validator

from billing_bridge.tools.base import BaseTool, ToolResult
from billing_bridge.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def validation_schema(input_schema: dict) -> dict:
    """Convert a published input schema into a standard JSON Schema.

    Published schemas may flag a property with ``"required": true``; JSON
    Schema expects a top-level list, so the flags are folded into it.
    """
    schema = copy.deepcopy(input_schema)
    required = list(schema.get("required", []))

    for prop_name, prop in schema.get("properties", {}).items():
        if isinstance(prop.get("required"), bool):
            if prop.pop("required") and prop_name not in required:
                required.append(prop_name)

    if required:
        schema["required"] = required
    return schema


class ToolDispatcher:
    """Look up tools by name and run them with a uniform result envelope."""

    def __init__(self, registry: ToolRegistry, validate_params: bool = False) -> None:
        self.registry = registry
        self.validate_params = validate_params
        self._validators: dict[str, Draft7Validator] = {}

    def _validator(self, tool: BaseTool) -> Draft7Validator:
        if tool.name not in self._validators:
            self._validators[tool.name] = Draft7Validator(validation_schema(tool.input_schema))
        return self._validators[tool.name]

    def _validate(self, tool: BaseTool, params: dict[str, Any]) -> str | None:
        """Return an error message if params do not match the tool's schema."""
        errors = sorted(self._validator(tool).iter_errors(params), key=lambda e: list(e.path))
        if not errors:
            return None
        error = errors[0]
        location = ".".join(str(p) for p in error.path)
        detail = f"{location}: {error.message}" if location else error.message
        return f"Invalid parameters for tool '{tool.name}': {detail}"

    async def execute_tool(self, name: str, params: Any = None) -> ToolResult:
        """Execute a tool by name.

        Never raises: every outcome is reported as a ToolResult.
        """
        tool = self.registry.find(name)
        if tool is None:
            logger.warning(f"Tool not found: {name}")
            return ToolResult.failure(f"Tool '{name}' not found")

        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            return ToolResult.failure("Parameters must be a JSON object")
        params = dict(params)

        if self.validate_params:
            error = self._validate(tool, params)
            if error:
                logger.info(error)
                return ToolResult.failure(error)

        logger.info(f"Executing tool {name} with params: {sorted(params)}")

        try:
            result = await tool.execute(params)
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            return ToolResult.failure(str(e) or type(e).__name__)

        if not isinstance(result, ToolResult):
            logger.error(f"Tool {name} returned {type(result).__name__} instead of a ToolResult")
            return ToolResult.failure(f"Tool '{name}' returned an invalid result")

        logger.info(
            f"Tool {name} finished: success={result.success} "
            f"records={len(result.records) if result.records is not None else result.total_size or 0}"
        )
        return result
