# prompto/tools/prompt_tools.py
"""
Prompt Tools
============
Năm operations trên prompt hub, dùng chung cho CLI, MCP và JSON-RPC.
"""

from typing import Any, Dict, List, Optional

from prompto.core.constants import CLI, MCP, RPC, REMOTE_TRANSPORTS, TEMPLATE_FORMATS
from prompto.core.errors import InvalidInputFormatError, PromptNotFoundError
from prompto.prompts.codec import TemplateCodec
from prompto.prompts.manager import PromptManager
from prompto.prompts.models import PromptDefinition, PromptRecord, PromptUpdate
from prompto.tools.base_tool import BaseTool, ParameterType, ToolParameter, ToolResult


# === Shared parameters ===

PROMPT_ID = ToolParameter(
    name="promptId",
    type=ParameterType.STRING,
    description="Prompt identifier, e.g. org/prompt-name.",
    required=True,
    positional=True
)

AS_JSON_CLI = ToolParameter(
    name="asJson",
    type=ParameterType.BOOLEAN,
    description="Output the raw JSON payload.",
    transports=frozenset({CLI}),
    cli_flags=("--json",)
)


def _definition_parameters(template_required: bool) -> List[ToolParameter]:
    """Parameters shared by create and update."""
    return [
        PROMPT_ID,
        ToolParameter(
            name="template",
            type=ParameterType.STRING,
            description="Prompt template content.",
            required=template_required,
            alternative="templateFile"
        ),
        ToolParameter(
            name="templateFile",
            type=ParameterType.STRING,
            description="Read the template from a file.",
            transports=frozenset({CLI})
        ),
        ToolParameter(
            name="format",
            type=ParameterType.STRING,
            description="Template format.",
            enum=TEMPLATE_FORMATS
        ),
        ToolParameter(
            name="variables",
            type=ParameterType.ARRAY,
            description="Template variables (CLI: JSON array of names or objects, or a JSON object).",
            items_type=ParameterType.STRING
        ),
        ToolParameter(
            name="tags",
            type=ParameterType.ARRAY,
            description="Metadata tags (CLI: JSON array).",
            items_type=ParameterType.STRING
        ),
        ToolParameter(
            name="description",
            type=ParameterType.STRING,
            description="Prompt description."
        ),
        ToolParameter(
            name="readme",
            type=ParameterType.STRING,
            description="README content."
        ),
        ToolParameter(
            name="readmeFile",
            type=ParameterType.STRING,
            description="Read the README from a file.",
            transports=frozenset({CLI})
        ),
        ToolParameter(
            name="isPublic",
            type=ParameterType.BOOLEAN,
            description="Visibility flag: true for public, false for private.",
            transports=REMOTE_TRANSPORTS
        ),
        ToolParameter(
            name="public",
            type=ParameterType.BOOLEAN,
            description="Make the prompt public.",
            transports=frozenset({CLI})
        ),
    ]


def _resolve_fields(codec: TemplateCodec, params: Dict[str, Any], template_required: bool) -> Dict[str, Any]:
    """Normalize transport arguments into definition fields (None = not given)."""
    variables = params.get("variables")
    tags = params.get("tags")

    is_public = params.get("isPublic")
    if is_public is None:
        is_public = codec.resolve_visibility(
            bool(params.get("public")), bool(params.get("private"))
        )

    return {
        "template": codec.resolve_text(
            params.get("template"), params.get("templateFile"), "template", required=template_required
        ),
        "template_format": codec.validate_format(params.get("format")),
        "template_variables": codec.normalize_variables(variables) if variables is not None else None,
        "tags": codec.normalize_tags(tags) if tags is not None else None,
        "description": params.get("description"),
        "readme": codec.resolve_text(params.get("readme"), params.get("readmeFile"), "readme"),
        "is_public": is_public,
    }


def format_prompt_table(records: List[PromptRecord]) -> str:
    """Plain-text table of prompts for terminal display."""
    if not records:
        return "No prompts found for your account."

    header = ("Full Name", "Updated", "Description", "Tags")
    rows = []
    for record in records:
        updated = "-"
        updated_at = record.updated_datetime
        if updated_at is not None:
            updated = updated_at.astimezone().strftime("%Y-%m-%d %H:%M")
        rows.append((
            record.prompt_id,
            updated,
            (record.description or "-").replace("\n", " "),
            ", ".join(record.tags) if record.tags else "-",
        ))

    widths = [max(len(row[i]) for row in [header] + rows) for i in range(len(header))]
    lines = ["  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip()
             for row in [header] + rows]
    lines.insert(1, "  ".join("-" * w for w in widths))
    return "\n".join(lines)


class ListPromptsTool(BaseTool):
    """Tool để liệt kê prompts"""

    @property
    def name(self) -> str:
        return "list"

    @property
    def names(self) -> Dict[str, str]:
        return {CLI: "list", MCP: "prompts_list", RPC: "list_prompts"}

    @property
    def description(self) -> str:
        return "List private LangSmith prompts, most recently updated first (optionally filter by query)."

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="query",
                type=ParameterType.STRING,
                description="Filter prompts by repository or owner handle.",
                cli_flags=("-q", "--query")
            ),
            AS_JSON_CLI,
        ]

    @property
    def json_by_default(self) -> bool:
        return True

    async def execute(self, manager: PromptManager, query: Optional[str] = None, **kwargs) -> ToolResult:
        records = await manager.list_prompts(query)
        return ToolResult(
            data=[record.to_dict() for record in records],
            text=format_prompt_table(records)
        )


class ShowPromptTool(BaseTool):
    """Tool để render một prompt"""

    @property
    def name(self) -> str:
        return "show"

    @property
    def names(self) -> Dict[str, str]:
        return {CLI: "show", MCP: "prompt_show", RPC: "get_prompt"}

    @property
    def description(self) -> str:
        return "Render a prompt locally with optional variables."

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            PROMPT_ID,
            ToolParameter(
                name="variables",
                type=ParameterType.OBJECT,
                description="Key/value variables for the template (CLI: key=value, repeatable).",
                items_type=ParameterType.STRING,
                cli_flags=("-v", "--var")
            ),
            ToolParameter(
                name="asJson",
                type=ParameterType.BOOLEAN,
                description="Return {id, variables, prompt} JSON instead of raw text.",
                transports=frozenset({CLI, MCP}),
                cli_flags=("--json",)
            ),
            ToolParameter(
                name="save",
                type=ParameterType.STRING,
                description="Write the output to this file.",
                transports=frozenset({CLI})
            ),
        ]

    async def execute(
        self,
        manager: PromptManager,
        promptId: str,
        variables: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> ToolResult:
        if variables is not None and not isinstance(variables, dict):
            raise InvalidInputFormatError("Variables must be an object of key/value pairs.")
        variables = variables or {}

        rendered = await manager.get_prompt(promptId, variables)
        if rendered is None:
            raise PromptNotFoundError(promptId)

        return ToolResult(
            data={"id": promptId, "variables": variables, "prompt": rendered},
            text=rendered
        )


class CreatePromptTool(BaseTool):
    """Tool để tạo prompt mới"""

    @property
    def name(self) -> str:
        return "create"

    @property
    def names(self) -> Dict[str, str]:
        return {CLI: "create", MCP: "prompt_create", RPC: "create_prompt"}

    @property
    def description(self) -> str:
        return "Create a new LangSmith prompt. An existing prompt with the same id is overwritten unless failIfExists is set."

    @property
    def parameters(self) -> List[ToolParameter]:
        return _definition_parameters(template_required=True) + [
            ToolParameter(
                name="failIfExists",
                type=ParameterType.BOOLEAN,
                description="Fail instead of overwriting an existing prompt."
            ),
        ]

    async def execute(self, manager: PromptManager, promptId: str, **kwargs) -> ToolResult:
        fields = _resolve_fields(manager.codec, kwargs, template_required=True)
        location = await manager.create_prompt(
            promptId,
            PromptDefinition(**fields),
            fail_if_exists=bool(kwargs.get("failIfExists"))
        )
        return ToolResult(
            data={"id": promptId, "location": location},
            text=f"Created: {location}"
        )


class UpdatePromptTool(BaseTool):
    """Tool để cập nhật prompt (merge với trạng thái hiện tại)"""

    @property
    def name(self) -> str:
        return "update"

    @property
    def names(self) -> Dict[str, str]:
        return {CLI: "update", MCP: "prompt_update", RPC: "update_prompt"}

    @property
    def description(self) -> str:
        return "Update an existing prompt with new content or metadata. Omitted fields keep their current values."

    @property
    def parameters(self) -> List[ToolParameter]:
        return _definition_parameters(template_required=False) + [
            ToolParameter(
                name="private",
                type=ParameterType.BOOLEAN,
                description="Make the prompt private.",
                transports=frozenset({CLI})
            ),
        ]

    async def execute(self, manager: PromptManager, promptId: str, **kwargs) -> ToolResult:
        update = PromptUpdate(**_resolve_fields(manager.codec, kwargs, template_required=False))
        if update.is_empty():
            raise InvalidInputFormatError("Nothing to update. Provide at least one field.")

        location = await manager.update_prompt(promptId, update)
        return ToolResult(
            data={"id": promptId, "location": location},
            text=f"Updated. Latest version: {location}"
        )


class DeletePromptTool(BaseTool):
    """Tool để xóa prompt"""

    @property
    def name(self) -> str:
        return "delete"

    @property
    def names(self) -> Dict[str, str]:
        return {CLI: "delete", MCP: "prompt_delete", RPC: "delete_prompt"}

    @property
    def description(self) -> str:
        return "Delete a prompt after confirming it exists."

    @property
    def parameters(self) -> List[ToolParameter]:
        return [PROMPT_ID]

    async def execute(self, manager: PromptManager, promptId: str, **kwargs) -> ToolResult:
        await manager.delete_prompt(promptId)
        return ToolResult(
            data={"id": promptId, "deleted": True},
            text=f'Deleted "{promptId}".'
        )
