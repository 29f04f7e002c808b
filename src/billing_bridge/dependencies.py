"""FastAPI dependencies for authentication and tool access."""

import secrets
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from billing_bridge.config import Settings
from billing_bridge.tools.dispatcher import ToolDispatcher
from billing_bridge.tools.registry import ToolRegistry


def get_app_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def get_registry(request: Request) -> ToolRegistry:
    """Tool registry dependency."""
    return request.app.state.registry


def get_dispatcher(request: Request) -> ToolDispatcher:
    """Tool dispatcher dependency."""
    return request.app.state.dispatcher


async def require_api_key(
    settings: Annotated[Settings, Depends(get_app_settings)],
    x_api_key: Annotated[Optional[str], Header()] = None,
) -> None:
    """Check the x-api-key header against the configured shared secret.

    No check is made when API_KEY is not configured.
    """
    expected = settings.API_KEY
    if not expected:
        return

    provided = (x_api_key or "").encode("utf-8")
    if not secrets.compare_digest(provided, expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "error": "Unauthorized: Invalid API key",
            },
        )


# Type aliases for cleaner dependency injection
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Registry = Annotated[ToolRegistry, Depends(get_registry)]
Dispatcher = Annotated[ToolDispatcher, Depends(get_dispatcher)]
