"""Tests for glrel.output.console."""

from __future__ import annotations

import threading

import pytest

from glrel.output.console import MockConsole, RichConsole, Style


def test_mock_console_records_styles() -> None:
    console = MockConsole()
    console.log("Uploaded file: /uploads/a.zip")
    console.error("The asset a.zip cannot be read, and will be ignored.")
    console.warning("slow")
    console.success("done")
    console.debug("repoId: group/project")

    assert console.messages == [
        "Uploaded file: /uploads/a.zip",
        "error: The asset a.zip cannot be read, and will be ignored.",
        "warning: slow",
        "OK done",
        "repoId: group/project",
    ]
    assert console.has_error()
    assert console.count(Style.DEBUG) == 1
    assert len(console.find("a.zip")) == 2


def test_mock_console_is_thread_safe() -> None:
    console = MockConsole()

    def _spam() -> None:
        for i in range(200):
            console.log(str(i))

    threads = [threading.Thread(target=_spam) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(console.outputs) == 800


def test_rich_console_hides_debug_unless_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    RichConsole().debug("hidden message")
    RichConsole(verbose=True).debug("shown message")
    out = capsys.readouterr().out
    assert "hidden message" not in out
    assert "shown message" in out


def test_rich_console_does_not_interpret_markup_in_messages(
    capsys: pytest.CaptureFixture[str],
) -> None:
    RichConsole().log("file [bold]x[/bold].zip")
    assert "file [bold]x[/bold].zip" in capsys.readouterr().out
