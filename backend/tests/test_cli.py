"""Tests for the click command line interface."""

import json
import time

import pytest
from click.testing import CliRunner

from prompto.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(runner, factory):
    def _invoke(*args):
        return runner.invoke(cli, list(args), obj={"manager_factory": factory})
    return _invoke


class TestList:
    def test_empty(self, invoke, env_api_key):
        result = invoke("list")
        assert result.exit_code == 0
        assert "No prompts found for your account." in result.output

    def test_table(self, invoke, hub, env_api_key):
        hub.seed("org/welcome", description="Greeting", tags=["a", "b"], updated_at="2024-01-01T00:00:00Z")
        hub.seed("org/bare")

        result = invoke("list")

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].split() == ["Full", "Name", "Updated", "Description", "Tags"]
        assert "org/welcome" in lines[2]
        assert "Greeting" in lines[2]
        assert "a, b" in lines[2]
        assert lines[3].split()[0] == "org/bare"

    def test_unparseable_timestamp_shows_dash(self, invoke, hub, env_api_key, monkeypatch):
        monkeypatch.setenv("TZ", "America/Los_Angeles")
        if hasattr(time, "tzset"):
            time.tzset()
        hub.seed("org/odd", updated_at="yesterday-ish")
        hub.seed("org/fresh", updated_at="2024-01-01T00:00:00Z")

        try:
            result = invoke("list")
        finally:
            monkeypatch.undo()
            if hasattr(time, "tzset"):
                time.tzset()

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[2].split()[0] == "org/fresh"
        assert lines[3].split()[:2] == ["org/odd", "-"]

    def test_json_with_query(self, invoke, hub, env_api_key):
        hub.seed("org/onboarding")
        hub.seed("org/other")

        result = invoke("list", "--query", "onboarding", "--json")

        assert result.exit_code == 0
        assert [p["promptId"] for p in json.loads(result.output)] == ["org/onboarding"]


class TestShow:
    def test_render_with_variables(self, invoke, hub, env_api_key):
        hub.seed("org/p", template="Hello {{name}}", variables=["name"])

        result = invoke("show", "org/p", "--var", "name=Ava")

        assert result.exit_code == 0
        assert "org/p" in result.output
        assert "name = Ava" in result.output
        assert result.output.rstrip().endswith("Hello Ava")

    def test_json(self, invoke, hub, env_api_key):
        hub.seed("org/p", template="Hello {{name}}", variables=["name"])

        result = invoke("show", "org/p", "-v", "name=Ava", "--json")

        assert json.loads(result.output) == {"id": "org/p", "variables": {"name": "Ava"}, "prompt": "Hello Ava"}

    def test_save(self, invoke, hub, env_api_key, tmp_path):
        hub.seed("org/p", template="Hello {{name}}", variables=["name"])
        target = tmp_path / "out.txt"

        result = invoke("show", "org/p", "--var", "name=Ava", "--save", str(target))

        assert result.exit_code == 0
        assert target.read_text(encoding="utf-8") == "Hello Ava\n"
        assert f"Saved to {target}" in result.output

    def test_missing(self, invoke, env_api_key):
        result = invoke("show", "org/missing")
        assert result.exit_code == 1
        assert 'Prompt "org/missing" was not found.' in result.output

    def test_malformed_variable(self, invoke, hub, env_api_key):
        result = invoke("show", "org/p", "--var", "name")
        assert result.exit_code == 1
        assert "key=value" in result.output
        assert hub.calls == []


class TestCreate:
    def test_inline(self, invoke, hub, env_api_key):
        result = invoke(
            "create", "org/p",
            "--template", "Hello {name}",
            "--format", "f-string",
            "--variables", '[{"name": "name"}]',
            "--tags", '["greeting"]',
            "--description", "Greeting",
            "--public",
        )

        assert result.exit_code == 0, result.output
        assert "Created: https://smith.test/prompts/p/abcd1234" in result.output
        push = hub.pushes[-1]
        assert push["manifest"]["kwargs"]["template_format"] == "f-string"
        assert push["manifest"]["kwargs"]["input_variables"] == ["name"]
        assert push["tags"] == ["greeting"]
        assert push["description"] == "Greeting"
        assert push["is_public"] is True

    def test_from_files(self, invoke, hub, env_api_key, tmp_path):
        template = tmp_path / "prompt.txt"
        template.write_text("From {{file}}", encoding="utf-8")
        readme = tmp_path / "README.md"
        readme.write_text("# Docs", encoding="utf-8")

        result = invoke("create", "org/p", "--template-file", str(template), "--readme-file", str(readme))

        assert result.exit_code == 0, result.output
        push = hub.pushes[-1]
        assert push["manifest"]["kwargs"]["template"] == "From {{file}}"
        assert push["readme"] == "# Docs"
        assert push["is_public"] is False

    def test_template_and_file_conflict(self, invoke, hub, env_api_key, tmp_path):
        result = invoke("create", "org/p", "--template", "x", "--template-file", str(tmp_path / "t.txt"))
        assert result.exit_code == 1
        assert "not both" in result.output
        assert hub.pushes == []

    def test_template_required(self, invoke, env_api_key):
        result = invoke("create", "org/p")
        assert result.exit_code == 1
        assert "Missing required parameter: template" in result.output

    def test_bad_variables_json(self, invoke, env_api_key):
        result = invoke("create", "org/p", "--template", "x", "--variables", "[oops")
        assert result.exit_code == 1
        assert "Invalid JSON for variables" in result.output

    def test_invalid_format_choice(self, invoke, env_api_key):
        result = invoke("create", "org/p", "--template", "x", "--format", "jinja2")
        assert result.exit_code == 2


class TestUpdate:
    def test_merge(self, invoke, hub, env_api_key):
        hub.seed("org/p", template="Hi {{name}}", variables=["name"], description="Old", is_public=True)

        result = invoke("update", "org/p", "--description", "New", "--private")

        assert result.exit_code == 0, result.output
        assert "Updated. Latest version:" in result.output
        push = hub.pushes[-1]
        assert push["description"] == "New"
        assert push["is_public"] is False
        assert push["manifest"]["kwargs"]["template"] == "Hi {{name}}"

    def test_public_and_private_conflict(self, invoke, hub, env_api_key):
        hub.seed("org/p")
        hub.calls.clear()

        result = invoke("update", "org/p", "--public", "--private")

        assert result.exit_code == 1
        assert "either --public or --private" in result.output
        assert hub.calls == []

    def test_nothing_to_update(self, invoke, hub, env_api_key):
        hub.seed("org/p")
        result = invoke("update", "org/p")
        assert result.exit_code == 1
        assert "Nothing to update" in result.output

    def test_missing(self, invoke, env_api_key):
        result = invoke("update", "org/missing", "--description", "x")
        assert result.exit_code == 1
        assert "was not found" in result.output


class TestDelete:
    def test_delete(self, invoke, hub, env_api_key):
        hub.seed("org/p")
        result = invoke("delete", "org/p")
        assert result.exit_code == 0
        assert 'Deleted "org/p".' in result.output
        assert hub.records == {}


class TestCredentials:
    def test_api_key_flag_wins(self, runner, factory, env_api_key):
        result = runner.invoke(cli, ["--api-key", "flag-key", "list"], obj={"manager_factory": factory})
        assert result.exit_code == 0
        assert factory.keys == ["flag-key"]

    def test_missing_credential(self, invoke, factory):
        result = invoke("list")
        assert result.exit_code == 1
        assert "Missing LangSmith API key" in result.output
        assert factory.keys == []


def test_help_lists_all_commands(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("list", "show", "create", "update", "delete", "serve", "mcp"):
        assert command in result.output
