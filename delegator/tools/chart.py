"""
Chart route: picks a preconfigured Chart.js configuration by keyword.

No model call is made. Templates are loaded and validated once; a malformed
template file fails construction.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Dict, Optional

from delegator.errors import ChartConfigError
from delegator.types import ChartKind, ChartReference

CHART_CONFIG_PATH = Path(__file__).with_name("chart_configs.json")
DEFAULT_KIND = ChartKind.BAR


def _validate(name: str, config: dict) -> ChartKind:
    if not isinstance(config, dict):
        raise ChartConfigError(f"Chart template '{name}' must be an object")
    try:
        kind = ChartKind(config.get("type"))
    except ValueError as e:
        raise ChartConfigError(f"Chart template '{name}' has unknown type {config.get('type')!r}") from e
    data = config.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("labels"), list):
        raise ChartConfigError(f"Chart template '{name}' needs data.labels")
    datasets = data.get("datasets")
    if not isinstance(datasets, list) or not datasets:
        raise ChartConfigError(f"Chart template '{name}' needs at least one dataset")
    for ds in datasets:
        if not isinstance(ds, dict) or not isinstance(ds.get("data"), list):
            raise ChartConfigError(f"Chart template '{name}' has a dataset without data")
    return kind


class ChartTool:
    """Keyword-selected chart configurations."""

    def __init__(self, templates: Dict[str, dict]):
        self.templates: Dict[ChartKind, dict] = {}
        for name, config in templates.items():
            kind = _validate(name, config)
            self.templates[kind] = config
        if DEFAULT_KIND not in self.templates:
            raise ChartConfigError("Chart templates must include a 'bar' configuration")

    @classmethod
    def from_file(cls, path: Optional[Path] = None) -> "ChartTool":
        path = path or CHART_CONFIG_PATH
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ChartConfigError(f"Could not load chart templates from {path}: {e}") from e
        templates = raw.get("chartConfigs") if isinstance(raw, dict) else None
        if not isinstance(templates, dict):
            raise ChartConfigError(f"{path} must contain a 'chartConfigs' object")
        return cls(templates)

    @staticmethod
    def detect_kind(text: str) -> ChartKind:
        lowered = (text or "").lower()
        if "pie" in lowered:
            return ChartKind.PIE
        if "line" in lowered:
            return ChartKind.LINE
        return DEFAULT_KIND

    def generate(self, query_text: str) -> ChartReference:
        kind = self.detect_kind(query_text)
        config = self.templates.get(kind) or self.templates[DEFAULT_KIND]
        return ChartReference(kind=ChartKind(config["type"]), config=copy.deepcopy(config))
