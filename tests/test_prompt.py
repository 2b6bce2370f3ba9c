"""
Tests for interactive version selection (tfswitch/prompt.py).
"""

import io

import pytest

from tfswitch.catalog import RECENT_MARKER
from tfswitch.errors import PromptAborted
from tfswitch.prompt import select_version


ITEMS = [f"1.5.7{RECENT_MARKER}", "1.6.0", "1.5.6", "1.5.5", "1.5.4"]


def _answers(*values):
    it = iter(values)

    def _input(prompt):
        value = next(it)
        if isinstance(value, BaseException):
            raise value
        return value

    return _input


def _select(items, *answers, **kwargs):
    output = io.StringIO()
    kwargs.setdefault("require_tty", False)
    choice = select_version(items, input_fn=_answers(*answers), output=output, **kwargs)
    return choice, output.getvalue()


class TestSelectVersion:
    """Tests for select_version."""

    def test_pick_by_number(self):
        choice, output = _select(ITEMS, "2")
        assert choice == "1.6.0"
        assert "  1) 1.5.7 *recent" in output

    def test_recent_marker_stripped(self):
        choice, _ = _select(ITEMS, "1")
        assert choice == "1.5.7"

    def test_pick_by_version(self):
        choice, _ = _select(ITEMS, "1.5.5")
        assert choice == "1.5.5"

    def test_invalid_then_valid(self):
        choice, output = _select(ITEMS, "99", "banana", "3")
        assert choice == "1.5.6"
        assert "Invalid choice: 99" in output
        assert "Invalid choice: banana" in output

    def test_paging(self):
        choice, output = _select(ITEMS, "", "5", page_size=2)
        assert choice == "1.5.4"
        assert "  3) 1.5.6" in output

    def test_quit(self):
        with pytest.raises(PromptAborted):
            _select(ITEMS, "q")

    @pytest.mark.parametrize("exc", [EOFError(), KeyboardInterrupt()])
    def test_interrupted(self, exc):
        with pytest.raises(PromptAborted):
            _select(ITEMS, exc)

    def test_empty_list(self):
        with pytest.raises(PromptAborted):
            _select([], "1")

    def test_requires_terminal(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        with pytest.raises(PromptAborted) as exc:
            select_version(ITEMS, input_fn=_answers("1"), output=io.StringIO())
        assert exc.value.remediation
