"""Performance module for equity snapshots and forecasts."""

from .models import BenchmarkComparison, CompoundingForecast, PerformanceSnapshot
from .tracker import PerformanceTracker

__all__ = [
    "BenchmarkComparison",
    "CompoundingForecast",
    "PerformanceSnapshot",
    "PerformanceTracker",
]
