import json
from copy import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jinja2
import yaml


def display_value(value: Any) -> str:
    """Strings as-is, everything else as indented JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False)


def inline_value(value: Any) -> str:
    """Strings as-is, everything else as single-line JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class TemplateManager:
    def __init__(
        self,
        file_path: Union[str, Path],
        section_path: Optional[str] = None,
        autoescape: bool = False,
    ) -> None:
        """Initialize the template manager with a YAML file path.

        Args:
            file_path: Path to the YAML file containing templates
            section_path: Section of the file to load templates from (supports dot notation for nested keys)
            autoescape: HTML-escape every rendered expression

        Raises:
            FileNotFoundError: If the template file doesn't exist
            yaml.YAMLError: If the YAML file is malformed
            ValueError: If the section is not found in the templates file
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Template file not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                self._template_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {file_path}: {e}")

        if section_path:
            self._template_data = self._traverse_path(self._template_data, section_path)

        self._environment = jinja2.Environment(
            autoescape=autoescape,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._environment.filters["display_value"] = display_value
        self._environment.filters["inline_value"] = inline_value

        # Cache for compiled templates
        self._template_cache: Dict[str, jinja2.Template] = {}

    def _traverse_path(self, data: Any, path: str) -> Any:
        """Traverse nested dictionary structure using dot notation."""
        current = data

        try:
            for key in path.split("."):
                current = current[key]
        except (KeyError, TypeError):
            raise ValueError(f"Path '{path}' not found in template data")

        return current

    def _load_template(self, template_name: str) -> Union[str, Dict[str, Any]]:
        """Load a template from the YAML data.

        Args:
            template_name: Key to load the template from (supports dot notation for nested keys)

        Returns:
            The template value (string or dictionary)

        Raises:
            ValueError: If the template is not found
        """
        try:
            template = self._traverse_path(self._template_data, template_name)
            return copy(template)
        except ValueError as e:
            raise ValueError(f"Template '{template_name}' not found: {e}")

    def render(self, template_name: str, **template_args) -> str:
        """Render a template with given parameters.

        Args:
            template_name: Name of the template to render (supports dot notation for nested keys)
            **template_args: Variables to substitute in the template

        Returns:
            Rendered string

        Raises:
            ValueError: If the template name is not found
            jinja2.TemplateError: If template rendering fails
        """
        template_value = self._load_template(template_name)
        if not isinstance(template_value, str):
            raise ValueError(f"Template '{template_name}' is not a string")

        return self._render_template(template_value, **template_args)

    def _render_template(self, template_str: str, **kwargs) -> str:
        """Render a Jinja2 template string.

        Uses template caching for performance.
        """
        if template_str not in self._template_cache:
            self._template_cache[template_str] = self._environment.from_string(template_str)

        return self._template_cache[template_str].render(**kwargs)
