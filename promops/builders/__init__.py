"""Per-kind metric builders"""
from .base import MetricBuilder
from .counter import Counter
from .gauge import Gauge
from .histogram import Histogram
from .summary import Summary

__all__ = ["MetricBuilder", "Counter", "Gauge", "Histogram", "Summary"]
