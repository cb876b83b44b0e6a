# prompto/cli.py
"""
Command line interface.

The five prompt commands are generated from the tool registry so their
flags stay in step with the MCP and JSON-RPC schemas.
"""

import asyncio
import json
import re
from pathlib import Path
from typing import Any, Dict, Optional

import click

from prompto.core.constants import CLI
from prompto.core.errors import PromptoError
from prompto.prompts.codec import template_codec
from prompto.prompts.manager import create_manager
from prompto.tools import tool_registry
from prompto.tools.base_tool import BaseTool, ParameterType, ToolParameter, ToolResult

EPILOG = """\b
Examples:
  $ prompto list
  $ prompto list --query onboarding
  $ prompto show org/welcome --var name=Alex --var locale=en
  $ prompto show org/welcome --json
  $ prompto create org/welcome --template "Hello {{name}}" --variables '["name"]'
"""


def _dest(name: str) -> str:
    """promptId -> prompt_id"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _to_click_param(param: ToolParameter) -> click.Parameter:
    dest = _dest(param.name)
    if param.positional:
        return click.Argument([dest], required=param.required)

    flags = list(param.cli_flags or ["--" + dest.replace("_", "-")])
    help_text = param.description

    if param.type == ParameterType.BOOLEAN:
        return click.Option(flags + [dest], is_flag=True, default=False, help=help_text)
    if param.type == ParameterType.OBJECT:
        return click.Option(flags + [dest], multiple=True, metavar="KEY=VALUE", help=help_text)
    if param.type == ParameterType.ARRAY:
        return click.Option(flags + [dest], metavar="JSON", help=help_text)
    if param.enum:
        return click.Option(flags + [dest], type=click.Choice(param.enum), help=help_text)
    return click.Option(flags + [dest], help=help_text)


def _collect_arguments(tool: BaseTool, values: Dict[str, Any]) -> Dict[str, Any]:
    """Map click values back to tool parameters, dropping unset ones."""
    arguments = {}
    for param in tool.parameters_for(CLI):
        value = values.get(_dest(param.name))
        if value is None or value is False or value == ():
            continue
        if param.type == ParameterType.OBJECT:
            value = template_codec.parse_variable_pairs(value)
        arguments[param.name] = value
    return arguments


def _render_output(result: ToolResult, arguments: Dict[str, Any]) -> str:
    if arguments.get("asJson"):
        return json.dumps(result.data, indent=2, ensure_ascii=False)
    return result.text


def _echo_show(result: ToolResult) -> None:
    data = result.data
    click.secho(f"\n{data['id']}", fg="cyan", bold=True)
    if data["variables"]:
        click.secho("Variables:", dim=True)
        for key, value in data["variables"].items():
            click.echo(f"  {click.style(key, fg='green')} = {value}")
        click.echo("")
    click.echo(data["prompt"])


def _build_command(tool: BaseTool) -> click.Command:
    def callback(**values):
        ctx = click.get_current_context()
        try:
            arguments = _collect_arguments(tool, values)
            result = asyncio.run(
                tool_registry.execute(
                    CLI,
                    tool.name_for(CLI),
                    arguments,
                    api_key=ctx.obj.get("api_key"),
                    manager_factory=ctx.obj["manager_factory"]
                )
            )
        except PromptoError as e:
            click.echo(f"Error: {e.message}", err=True)
            ctx.exit(1)

        save_path = arguments.get("save")
        if save_path:
            output = _render_output(result, arguments)
            try:
                Path(save_path).write_text(output + "\n", encoding="utf-8")
            except OSError as e:
                click.echo(f"Error: Cannot write {save_path}: {e}", err=True)
                ctx.exit(1)
            click.echo(f"Saved to {save_path}")
        elif tool.name == "show" and not arguments.get("asJson"):
            _echo_show(result)
        else:
            click.echo(_render_output(result, arguments))

    return click.Command(
        name=tool.name_for(CLI),
        callback=callback,
        params=[_to_click_param(p) for p in tool.parameters_for(CLI)],
        help=tool.description,
    )


@click.group(epilog=EPILOG)
@click.option("--api-key", help="LangSmith API key (defaults to LANGSMITH_API_KEY).")
@click.pass_context
def cli(ctx: click.Context, api_key: Optional[str]) -> None:
    """Manage LangSmith prompts from the command line."""
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj.setdefault("manager_factory", create_manager)


for _tool in tool_registry.get_all():
    cli.add_command(_build_command(_tool))


@cli.command("serve")
@click.option("--host", default=None, help="Bind address (defaults to HOST).")
@click.option("--port", type=int, default=None, help="Port (defaults to PORT).")
def serve(host: Optional[str], port: Optional[int]) -> None:
    """Run the JSON-RPC HTTP endpoint."""
    import main_api

    main_api.run(host=host, port=port)


@cli.command("mcp")
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http"]),
    default="stdio",
    show_default=True,
    help="MCP transport.",
)
@click.option("--host", default=None, help="Bind address for http (defaults to HOST).")
@click.option("--port", type=int, default=None, help="Port for http (defaults to PORT).")
def mcp_command(transport: str, host: Optional[str], port: Optional[int]) -> None:
    """Run the MCP server."""
    from prompto.mcp.server import run_http, run_stdio

    if transport == "stdio":
        asyncio.run(run_stdio())
    else:
        run_http(host=host, port=port)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
