"""
Tests for the chart and image route executors.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from delegator.errors import ChartConfigError, ImageGenerationError, RouteExecutionError
from delegator.tools import ChartTool, ImageTool
from delegator.types import ChartKind, ChartReference, ImageReference


def _template(kind: str) -> dict:
    return {
        "type": kind,
        "data": {"labels": ["a", "b"], "datasets": [{"label": kind, "data": [1, 2]}]},
    }


# --- Chart ---


@pytest.fixture(scope="module")
def chart_tool() -> ChartTool:
    return ChartTool.from_file()


@pytest.mark.parametrize(
    "text,kind",
    [
        ("Show me a pie chart", ChartKind.PIE),
        ("Plot a LINE graph of revenue", ChartKind.LINE),
        ("chart the sales", ChartKind.BAR),
        ("", ChartKind.BAR),
    ],
)
def test_chart_kind_by_keyword(chart_tool, text, kind):
    ref = chart_tool.generate(text)
    assert isinstance(ref, ChartReference)
    assert ref.kind is kind
    assert ref.config["type"] == kind.value
    assert ref.config["data"]["datasets"]


def test_pie_checked_before_line(chart_tool):
    assert chart_tool.generate("pie and line").kind is ChartKind.PIE


def test_chart_payload_is_a_copy(chart_tool):
    first = chart_tool.generate("bar")
    first.config["data"]["labels"].append("mutated")
    second = chart_tool.generate("bar")
    assert "mutated" not in second.config["data"]["labels"]


def test_missing_kind_falls_back_to_bar():
    tool = ChartTool({"bar": _template("bar")})
    assert tool.generate("pie please").kind is ChartKind.BAR


@pytest.mark.parametrize(
    "templates",
    [
        {"bar": {"type": "radar", "data": {"labels": [], "datasets": [{"data": []}]}}},
        {"bar": {"type": "bar", "data": {"labels": ["a"], "datasets": []}}},
        {"bar": {"type": "bar", "data": {"datasets": [{"data": [1]}]}}},
        {"bar": {"type": "bar", "data": {"labels": ["a"], "datasets": [{"label": "x"}]}}},
        {"pie": _template("pie")},
        {"bar": "not an object"},
    ],
)
def test_malformed_templates_fail_at_construction(templates):
    with pytest.raises(ChartConfigError):
        ChartTool(templates)


def test_from_file_errors(tmp_path):
    with pytest.raises(ChartConfigError):
        ChartTool.from_file(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ChartConfigError):
        ChartTool.from_file(bad)
    wrong = tmp_path / "wrong.json"
    wrong.write_text(json.dumps({"charts": {}}), encoding="utf-8")
    with pytest.raises(ChartConfigError):
        ChartTool.from_file(wrong)


# --- Image ---


def _session(ok: bool = True, status: int = 200, reason: str = "OK") -> MagicMock:
    session = MagicMock()
    session.head.return_value = SimpleNamespace(ok=ok, status_code=status, reason=reason)
    return session


def test_text_to_image_mode():
    session = _session()
    tool = ImageTool(base_url="https://img.example/prompt", session=session)
    ref = tool.generate("a red fox")
    assert isinstance(ref, ImageReference)
    assert ref.model == "flux"
    assert ref.prompt == "a red fox"
    parsed = urlparse(ref.url)
    assert parsed.path == "/prompt/a%20red%20fox"
    params = parse_qs(parsed.query)
    assert params["model"] == ["flux"]
    assert params["width"] == ["1024"]
    assert params["nologo"] == ["true"]
    assert "image" not in params
    session.head.assert_called_once()
    assert session.head.call_args.args[0] == ref.url


def test_edit_mode_with_source_image():
    tool = ImageTool(base_url="https://img.example/prompt", session=_session())
    ref = tool.generate("make it blue", "https://cdn.example/cat.png?x=1")
    params = parse_qs(urlparse(ref.url).query)
    assert ref.model == "kontext"
    assert params["model"] == ["kontext"]
    assert params["image"] == ["https://cdn.example/cat.png?x=1"]


def test_image_non_success_raises_route_error():
    tool = ImageTool(session=_session(ok=False, status=502, reason="Bad Gateway"))
    with pytest.raises(ImageGenerationError) as exc_info:
        tool.generate("a cat")
    assert isinstance(exc_info.value, RouteExecutionError)
    assert "502" in str(exc_info.value)


def test_image_transport_error_raises_route_error():
    session = MagicMock()
    session.head.side_effect = requests.ConnectionError("unreachable")
    with pytest.raises(ImageGenerationError):
        ImageTool(session=session).generate("a cat")
    assert session.head.call_count == 1
