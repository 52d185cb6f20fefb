"""
Tests for prompt templates and loaders.
"""

import json

import pytest
import yaml

from agents.templates import (
    FileTemplateLoader,
    InMemoryTemplateLoader,
    PromptTemplate,
    PromptVariable,
    TemplateFormat,
    TemplateManager,
)


class TestPromptTemplate:
    """Test template rendering."""

    def test_render_keeps_json_braces(self):
        template = PromptTemplate(
            name="t",
            template='Data: $payload {"keep": true}',
            variables=[PromptVariable("payload", "data")],
        )
        assert template.render(payload='{"a": 1}') == 'Data: {"a": 1} {"keep": true}'

    def test_missing_required_variable(self):
        template = PromptTemplate(name="t", template="$x", variables=[PromptVariable("x", "value")])
        with pytest.raises(ValueError, match="Missing required variables"):
            template.render()

    def test_default_value(self):
        template = PromptTemplate(
            name="t",
            template="Levels: $levels",
            variables=[PromptVariable("levels", "allowed", False, "a, b")],
        )
        assert template.render() == "Levels: a, b"

    def test_undeclared_variable(self):
        template = PromptTemplate(name="t", template="$unknown")
        with pytest.raises(ValueError, match="missing variable"):
            template.render()


class TestLoaders:
    """Test file and in-memory loaders."""

    @pytest.mark.asyncio
    async def test_yaml_loader(self, tmp_path):
        (tmp_path / "greeting.yaml").write_text(yaml.safe_dump({
            "description": "Say hello",
            "template": "Hello $name",
            "variables": [{"name": "name", "description": "Who"}],
            "tags": ["demo"],
            "version": 2,
        }))

        template = await FileTemplateLoader(tmp_path).load_template("greeting")

        assert template.format == TemplateFormat.YAML
        assert template.version == "2"
        assert template.tags == ["demo"]
        assert template.render(name="supervisor") == "Hello supervisor"

    @pytest.mark.asyncio
    async def test_json_and_text_loader(self, tmp_path):
        (tmp_path / "a.json").write_text(json.dumps({"template": "A $x"}))
        (tmp_path / "b.txt").write_text("B")
        loader = FileTemplateLoader(tmp_path)

        assert (await loader.load_template("a")).format == TemplateFormat.JSON
        assert (await loader.load_template("b")).render() == "B"
        assert await loader.list_templates() == ["a", "b"]

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await FileTemplateLoader(tmp_path).load_template("nope")

    @pytest.mark.asyncio
    async def test_in_memory_missing(self):
        with pytest.raises(KeyError):
            await InMemoryTemplateLoader().load_template("nope")


class TestTemplateManager:
    """Test the template manager."""

    @pytest.mark.asyncio
    async def test_builtin_templates(self):
        manager = TemplateManager()
        names = await manager.default_loader.list_templates()
        assert set(names) == {"analysis_insights", "issue_suggestions", "plan_suggestions"}

    @pytest.mark.asyncio
    async def test_named_loader_and_cache(self, tmp_path):
        (tmp_path / "custom.txt").write_text("v1 $x")
        manager = TemplateManager()
        manager.add_loader("files", FileTemplateLoader(tmp_path))

        assert await manager.render_template("custom", {"x": "1"}, loader_name="files") == "v1 1"

        (tmp_path / "custom.txt").write_text("v2 $x")
        assert await manager.render_template("custom", {"x": "1"}, loader_name="files") == "v1 1"

        manager.clear_cache()
        assert await manager.render_template("custom", {"x": "1"}, loader_name="files") == "v2 1"

    @pytest.mark.asyncio
    async def test_unknown_loader(self):
        with pytest.raises(ValueError, match="Loader 'missing' not found"):
            await TemplateManager().get_template("analysis_insights", loader_name="missing")
