"""
Non-retrieval route executors: chart configurations and image generation.
"""

from .chart import CHART_CONFIG_PATH, ChartTool
from .image import ImageTool

__all__ = ["CHART_CONFIG_PATH", "ChartTool", "ImageTool"]
