"""Tool definitions, registry and dispatcher."""
