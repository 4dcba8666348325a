"""Console helpers for the upgrade CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer
from rich.tree import Tree

from authoring_upgrade.core.models import is_falsy_string

_SYMBOLS = {
    "pending": "[green dim]○[/green dim]",
    "running": "[cyan]○[/cyan]",
    "done": "[green]●[/green]",
    "error": "[red]●[/red]",
    "skipped": "[yellow]○[/yellow]",
}


@dataclass
class Step:
    key: str
    label: str
    status: str = "pending"
    detail: str = ""


class StepTracker:
    """Track pipeline steps and render them as a Rich tree."""

    def __init__(self, title: str):
        self.title = title
        self.steps: list[Step] = []

    def _find(self, key: str) -> Optional[Step]:
        for step in self.steps:
            if step.key == key:
                return step
        return None

    def add(self, key: str, label: str) -> None:
        if self._find(key) is None:
            self.steps.append(Step(key=key, label=label))

    def status_of(self, key: str) -> Optional[str]:
        step = self._find(key)
        return step.status if step else None

    def start(self, key: str, detail: str = "") -> None:
        self._update(key, "running", detail)

    def complete(self, key: str, detail: str = "") -> None:
        self._update(key, "done", detail)

    def error(self, key: str, detail: str = "") -> None:
        self._update(key, "error", detail)

    def skip(self, key: str, detail: str = "") -> None:
        self._update(key, "skipped", detail)

    def _update(self, key: str, status: str, detail: str) -> None:
        step = self._find(key)
        if step is None:
            step = Step(key=key, label=key)
            self.steps.append(step)
        step.status = status
        if detail:
            step.detail = detail

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            symbol = _SYMBOLS.get(step.status, " ")
            detail = step.detail.strip()
            if step.status == "pending":
                text = f"{step.label} ({detail})" if detail else step.label
                tree.add(f"{symbol} [bright_black]{text}[/bright_black]")
            elif detail:
                tree.add(f"{symbol} [white]{step.label}[/white] [bright_black]({detail})[/bright_black]")
            else:
                tree.add(f"{symbol} [white]{step.label}[/white]")
        return tree


def to_boolean(value: object, default: bool = True) -> bool:
    """Read a Y/n style answer; empty input keeps the default."""
    if isinstance(value, bool):
        return value
    if value is None or not str(value).strip():
        return default
    return not is_falsy_string(value)


def ask_yes_no(question: str, default: bool = True) -> bool:
    hint = "Y/n" if default else "y/N"
    answer = typer.prompt(f"{question} {hint}", default="", show_default=False)
    return to_boolean(answer, default=default)


def ask_revision(description: str) -> str:
    return typer.prompt(description, default="", show_default=False).strip()


__all__ = ["Step", "StepTracker", "ask_revision", "ask_yes_no", "to_boolean"]
