"""Top-level page categories, each backed by a template directory."""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from pathlib import Path

TEMPLATES_DIR = "templates"


class UnknownCategory(ValueError):
    """Raised when a URL segment names no category."""


def is_category(name: str, templates_dir: str | PathLike[str] = TEMPLATES_DIR) -> bool:
    """Whether ``templates_dir/name/index.html.hbs`` exists."""
    return (Path(templates_dir) / name / "index.html.hbs").exists()


@dataclass(frozen=True)
class Category:
    """A category such as ``learn`` or ``tools``."""

    name: str

    @classmethod
    def from_param(cls, param: str, templates_dir: str | PathLike[str] = TEMPLATES_DIR) -> Category:
        """Build a category from a URL segment, raising UnknownCategory if none exists."""
        if is_category(param, templates_dir):
            return cls(param)
        raise UnknownCategory(f"No category called <{param}>")

    def index(self) -> str:
        """The template name of the category's index page."""
        return f"{self.name}/index"