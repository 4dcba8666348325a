from __future__ import annotations

import pytest
from rich.console import Console

from authoring_upgrade.cli.ui import StepTracker, to_boolean


@pytest.mark.parametrize(
    ("answer", "expected"),
    [("", True), ("Y", True), ("yes", True), ("n", False), ("No", False), ("false", False), (False, False)],
)
def test_to_boolean(answer, expected):
    assert to_boolean(answer) is expected


def test_to_boolean_empty_keeps_default():
    assert to_boolean("  ", default=False) is False


def test_step_tracker_renders_each_step():
    tracker = StepTracker("Upgrade")
    tracker.add("authoring", "Update authoring tool")
    tracker.add("authoring", "duplicate is ignored")
    tracker.complete("authoring", "v0.11.0")
    tracker.skip("framework", "no revision")

    console = Console(record=True, width=120, color_system=None)
    console.print(tracker.render())
    output = console.export_text()

    assert [step.key for step in tracker.steps] == ["authoring", "framework"]
    assert "Update authoring tool" in output
    assert "(v0.11.0)" in output
    assert "(no revision)" in output
