"""Base tool interface for on-demand graph operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class ToolResult:
    """Result from tool execution.

    ``output`` is the short text shown to the user; ``details`` carries the
    structured payload for the host.
    """

    success: bool
    output: str
    error: str | None = None
    details: dict[str, Any] | None = None


class Tool(ABC):
    """Base interface for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name."""
        ...

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable tool name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description for LLM."""
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for tool parameters."""
        ...

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with given arguments."""
        ...

    def get_schema(self) -> dict[str, Any]:
        """Get tool schema for LLM function calling."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def validate_args(self, args: dict[str, Any]) -> tuple[bool, str | None]:
        """Validate arguments against schema. Returns (valid, error_message)."""
        required = self.parameters.get("required", [])
        properties = self.parameters.get("properties", {})

        for name in required:
            if name not in args:
                return False, f"Missing required argument: {name}"

        for key, value in args.items():
            if key not in properties:
                continue
            schema = properties[key]
            expected_type = schema.get("type")
            if expected_type == "string" and not isinstance(value, str):
                return False, f"Argument '{key}' must be a string"
            if expected_type in ("integer", "number"):
                # bool is an int subclass
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    return False, f"Argument '{key}' must be a number"
                if expected_type == "integer" and not float(value).is_integer():
                    return False, f"Argument '{key}' must be an integer"
                if "minimum" in schema and value < schema["minimum"]:
                    return False, f"Argument '{key}' must be at least {schema['minimum']}"
                if "maximum" in schema and value > schema["maximum"]:
                    return False, f"Argument '{key}' must be at most {schema['maximum']}"

        return True, None
