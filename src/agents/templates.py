"""
Prompt templates for the wizard's text-generation steps.

Templates use string.Template ($name) placeholders so JSON braces in prompt
text and in substituted values pass through untouched. The three built-in
templates live in memory; a directory of YAML, JSON or text files can be
registered as an additional loader to override wording.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from string import Template
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml


class TemplateFormat(Enum):
    STRING = "string"
    YAML = "yaml"
    JSON = "json"


@dataclass
class PromptVariable:
    name: str
    description: str
    required: bool = True
    default_value: Optional[Any] = None


@dataclass
class PromptTemplate:
    """A named prompt with declared variables."""
    name: str
    template: str
    description: str = ""
    variables: List[PromptVariable] = field(default_factory=list)
    format: TemplateFormat = TemplateFormat.STRING
    tags: List[str] = field(default_factory=list)
    version: str = "1.0"

    @property
    def required_variables(self) -> List[str]:
        return sorted(var.name for var in self.variables if var.required)

    def render(self, **kwargs) -> str:
        """
        Substitute variables into the template.

        Declared defaults fill in omitted optional variables; extra keyword
        arguments are ignored.

        Raises:
            ValueError: a required or undeclared placeholder has no value
        """
        missing = [name for name in self.required_variables if name not in kwargs]
        if missing:
            raise ValueError(f"Missing required variables: {missing}")

        values = {
            var.name: var.default_value
            for var in self.variables
            if var.default_value is not None
        }
        values.update(kwargs)
        try:
            return Template(self.template).substitute(values)
        except KeyError as e:
            raise ValueError(f"Template rendering failed: missing variable {e}")

    @classmethod
    def from_mapping(cls, name: str, data: Dict[str, Any], fmt: TemplateFormat) -> "PromptTemplate":
        """Build a template from a parsed YAML/JSON document."""
        return cls(
            name=name,
            template=data["template"],
            description=data.get("description", ""),
            variables=[PromptVariable(**var) for var in data.get("variables", [])],
            format=fmt,
            tags=list(data.get("tags", [])),
            version=str(data.get("version", "1.0")),
        )


class TemplateLoader(ABC):
    """Source of templates by name."""

    @abstractmethod
    async def load_template(self, template_name: str) -> PromptTemplate:
        pass

    @abstractmethod
    async def list_templates(self) -> List[str]:
        pass


class FileTemplateLoader(TemplateLoader):
    """
    Templates stored as files named after the template.

    .yaml/.yml and .json files hold a mapping with a "template" key plus
    optional description, variables, tags and version; .txt files are the
    raw template text. The first matching extension wins.
    """

    FORMATS: Tuple[Tuple[str, TemplateFormat], ...] = (
        (".yaml", TemplateFormat.YAML),
        (".yml", TemplateFormat.YAML),
        (".json", TemplateFormat.JSON),
        (".txt", TemplateFormat.STRING),
    )

    def __init__(self, templates_dir: Union[str, Path]):
        self.templates_dir = Path(templates_dir)

    async def load_template(self, template_name: str) -> PromptTemplate:
        for suffix, fmt in self.FORMATS:
            path = self.templates_dir / f"{template_name}{suffix}"
            if path.is_file():
                return self._read(path, fmt)
        raise FileNotFoundError(f"Template '{template_name}' not found in {self.templates_dir}")

    async def list_templates(self) -> List[str]:
        if not self.templates_dir.is_dir():
            return []
        suffixes = {suffix for suffix, _ in self.FORMATS}
        return sorted({p.stem for p in self.templates_dir.iterdir() if p.suffix in suffixes})

    def _read(self, path: Path, fmt: TemplateFormat) -> PromptTemplate:
        content = path.read_text(encoding="utf-8")
        if fmt == TemplateFormat.YAML:
            return PromptTemplate.from_mapping(path.stem, yaml.safe_load(content), fmt)
        if fmt == TemplateFormat.JSON:
            return PromptTemplate.from_mapping(path.stem, json.loads(content), fmt)
        return PromptTemplate(name=path.stem, template=content)


class InMemoryTemplateLoader(TemplateLoader):
    """Templates registered at runtime."""

    def __init__(self):
        self.templates: Dict[str, PromptTemplate] = {}

    def add_template(self, template: PromptTemplate):
        self.templates[template.name] = template

    async def load_template(self, template_name: str) -> PromptTemplate:
        try:
            return self.templates[template_name]
        except KeyError:
            raise KeyError(f"Template '{template_name}' not found") from None

    async def list_templates(self) -> List[str]:
        return sorted(self.templates)


ANALYSIS_INSIGHTS_TEMPLATE = PromptTemplate(
    name="analysis_insights",
    template="""You are an expert educational supervisor analyzing school performance data.
Based on the following JSON summary of school data, generate 3-4 key insights.
Focus on correlations, surprising findings, and actionable recommendations.
Return an object with an "insights" array; each item has a "title" (a short,
catchy title) and a "text" (one concise paragraph explaining the insight and its
implications). Keep it professional and data-driven.

Data:
$analysis_json""",
    description="Key insights from the aggregated school analysis",
    variables=[
        PromptVariable("analysis_json", "JSON summary of the analysis report", True),
    ],
    tags=["analysis", "insights"]
)

ISSUE_SUGGESTIONS_TEMPLATE = PromptTemplate(
    name="issue_suggestions",
    template="""You are an expert in organizational development and educational leadership.
You are given a list of root causes for a problem in a school system.
Reframe these root causes into 3-4 actionable "How might we..." questions, called central issues.

Root Causes:
$root_causes

Return an object with an "issues" array. Each issue has:
- "title": a short, thematic name for the issue
- "action": the verb phrase, what is to be done
- "subject": the noun phrase, what is being acted upon
- "context": how or where the action happens
- "result": the desired outcome
- "vision": a strategic, long-term vision statement
- "rationale": why this issue answers the root causes
- "level": one of $levels""",
    description="Central issue suggestions derived from root causes",
    variables=[
        PromptVariable("root_causes", "Bullet list of root causes", True),
        PromptVariable(
            "levels",
            "Allowed intervention levels",
            False,
            '"individual (staff)", "system (organization)", "system (resources/content)", "strategy (intervention)"'
        ),
    ],
    tags=["issues"]
)

PLAN_SUGGESTIONS_TEMPLATE = PromptTemplate(
    name="plan_suggestions",
    template="""You are an AI assistant for educational strategy. Given a central issue and a vision,
generate a main goal and 3 SMART objectives for an intervention plan.

Central Issue:
"$issue_question"

Strategic Vision:
"$vision"

Return an object with "main_goal" (one concise string) and "smart_objectives"
(an array of 3 Specific, Measurable, Achievable, Relevant, Time-bound objectives).""",
    description="Main goal and SMART objectives for a chosen issue",
    variables=[
        PromptVariable("issue_question", "The central issue phrased as a question", True),
        PromptVariable("vision", "Strategic vision for the issue", True),
    ],
    tags=["plan"]
)


BUILTIN_TEMPLATES = (ANALYSIS_INSIGHTS_TEMPLATE, ISSUE_SUGGESTIONS_TEMPLATE, PLAN_SUGGESTIONS_TEMPLATE)


class TemplateManager:
    """Resolves templates through named loaders and caches them."""

    def __init__(self, default_loader: Optional[TemplateLoader] = None):
        if default_loader is None:
            default_loader = InMemoryTemplateLoader()
            for template in BUILTIN_TEMPLATES:
                default_loader.add_template(template)
        self.default_loader = default_loader
        self.loaders: Dict[str, TemplateLoader] = {}
        self.template_cache: Dict[Tuple[Optional[str], str], PromptTemplate] = {}

    def add_loader(self, name: str, loader: TemplateLoader):
        self.loaders[name] = loader

    async def get_template(self, template_name: str, loader_name: Optional[str] = None) -> PromptTemplate:
        key = (loader_name, template_name)
        if key not in self.template_cache:
            if loader_name is None:
                loader = self.default_loader
            elif loader_name in self.loaders:
                loader = self.loaders[loader_name]
            else:
                raise ValueError(f"Loader '{loader_name}' not found")
            self.template_cache[key] = await loader.load_template(template_name)
        return self.template_cache[key]

    async def render_template(
        self,
        template_name: str,
        variables: Dict[str, Any],
        loader_name: Optional[str] = None
    ) -> str:
        template = await self.get_template(template_name, loader_name)
        return template.render(**variables)

    def clear_cache(self):
        self.template_cache.clear()


_template_manager: Optional[TemplateManager] = None


def get_template_manager() -> TemplateManager:
    """Process-wide manager used by agents that are not given one."""
    global _template_manager
    if _template_manager is None:
        _template_manager = TemplateManager()
    return _template_manager


def set_template_manager(manager: Optional[TemplateManager]):
    """Replace the process-wide manager; None resets it to the built-ins."""
    global _template_manager
    _template_manager = manager
