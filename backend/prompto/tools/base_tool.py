# prompto/tools/base_tool.py
"""
Base Tool Definition
====================
Định nghĩa cấu trúc chuẩn cho các prompt operations.
Mỗi tool có:
- name: tên logic (list, show, create, update, delete)
- names: tên theo từng transport (cli / mcp / rpc)
- description: mô tả cho người dùng và MCP clients
- parameters: schema của input, dùng chung cho cả 3 transports
- execute(): async function gọi PromptManager
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from prompto.core.constants import TRANSPORTS
from prompto.core.errors import InvalidInputFormatError
from prompto.prompts.manager import PromptManager


class ParameterType(str, Enum):
    """Supported parameter types for tools"""
    STRING = "string"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


_PYTHON_TYPES = {
    ParameterType.STRING: str,
    ParameterType.BOOLEAN: bool,
}


@dataclass
class ToolParameter:
    """
    Định nghĩa một parameter của tool.

    Example:
        ToolParameter(
            name="format",
            type=ParameterType.STRING,
            description="Template format",
            enum=["mustache", "f-string"]
        )

    Attributes:
        transports: transports exposing this parameter
        cli_flags: explicit click flags (default: --kebab-case of name)
        positional: exposed as a CLI argument instead of an option
        alternative: another parameter that satisfies `required`
    """
    name: str
    type: ParameterType
    description: str
    required: bool = False
    default: Any = None
    enum: Optional[List[str]] = None
    items_type: Optional[ParameterType] = None  # For array types
    transports: FrozenSet[str] = TRANSPORTS
    cli_flags: Optional[Tuple[str, ...]] = None
    positional: bool = False
    alternative: Optional[str] = None

    def to_json_schema(self) -> Dict[str, Any]:
        """Convert to JSON Schema format"""
        schema = {
            "type": self.type.value,
            "description": self.description
        }

        if self.enum:
            schema["enum"] = self.enum

        if self.type == ParameterType.ARRAY and self.items_type:
            schema["items"] = {"type": self.items_type.value}

        if self.type == ParameterType.OBJECT and self.items_type:
            schema["additionalProperties"] = {"type": self.items_type.value}

        if self.default is not None:
            schema["default"] = self.default

        return schema

    def exposed_on(self, transport: str) -> bool:
        return transport in self.transports


@dataclass
class ToolResult:
    """
    Kết quả trả về từ tool execution.

    Attributes:
        data: Machine-readable result (JSON serializable)
        text: Human-readable form of the result
    """
    data: Any = None
    text: str = ""


class BaseTool(ABC):
    """
    Base class cho tất cả prompt operations.

    Mỗi tool phải implement:
    - name, names, description, parameters properties
    - execute() async method

    Errors are raised, not returned; each transport wraps them into its
    own error envelope.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Logical operation name"""
        pass

    @property
    @abstractmethod
    def names(self) -> Dict[str, str]:
        """Tool name per transport"""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @property
    @abstractmethod
    def parameters(self) -> List[ToolParameter]:
        """List of parameters this tool accepts"""
        pass

    @property
    def json_by_default(self) -> bool:
        """Whether MCP answers with the JSON form unless asked otherwise"""
        return False

    @abstractmethod
    async def execute(self, manager: PromptManager, **kwargs) -> ToolResult:
        """
        Thực thi tool với các parameters.

        Args:
            manager: PromptManager built for this call
            **kwargs: Parameters (đã validated)
        """
        pass

    def name_for(self, transport: str) -> str:
        return self.names[transport]

    def parameters_for(self, transport: str) -> List[ToolParameter]:
        return [p for p in self.parameters if p.exposed_on(transport)]

    def to_mcp_schema(self, transport: str, extra: Optional[List[ToolParameter]] = None) -> Dict[str, Any]:
        """
        Convert to MCP-compatible schema for one transport.
        This format can be used by any MCP-compatible client.
        """
        params = self.parameters_for(transport) + list(extra or [])
        names = {p.name for p in params}
        return {
            "name": self.name_for(transport),
            "description": self.description,
            "inputSchema": {
                "type": "object",
                "properties": {
                    param.name: param.to_json_schema()
                    for param in params
                },
                "required": [
                    p.name for p in params
                    if p.required and not (p.alternative and p.alternative in names)
                ]
            }
        }

    def validate_params(self, transport: str, params: Dict[str, Any]) -> None:
        """
        Validate parameters before execution.

        Raises:
            InvalidInputFormatError: unknown, missing or ill-typed parameters
        """
        exposed = {p.name: p for p in self.parameters_for(transport)}

        for key in params:
            if key not in exposed:
                raise InvalidInputFormatError(
                    f"Unknown parameter for {self.name_for(transport)}: {key}"
                )

        for param in exposed.values():
            value = params.get(param.name)
            if value is None:
                satisfied = param.alternative and params.get(param.alternative) is not None
                if param.required and not satisfied:
                    raise InvalidInputFormatError(f"Missing required parameter: {param.name}")
                continue

            expected = _PYTHON_TYPES.get(param.type)
            if expected and not isinstance(value, expected):
                raise InvalidInputFormatError(
                    f"Invalid value for {param.name}: expected {param.type.value}"
                )

            if param.enum and value not in param.enum:
                raise InvalidInputFormatError(
                    f"Invalid value for {param.name}. Must be one of: {param.enum}"
                )

    def __repr__(self) -> str:
        return f"<Tool: {self.name}>"
