"""Build, batch and encode intended Prometheus metric mutations"""
from .batch import PrometheusOperations
from .builders import Counter, Gauge, Histogram, Summary
from .errors import InvalidOperationError, OperationDecodeError, PromOpsError
from .models import (
    UNUSED,
    CounterAction,
    CounterOp,
    GaugeAction,
    GaugeOp,
    HistogramAction,
    HistogramOp,
    Labels,
    MetricType,
    Operation,
    SummaryAction,
    SummaryOp,
    label_set,
)

__version__ = "0.2.0"

__all__ = [
    "PrometheusOperations",
    "Counter",
    "Gauge",
    "Histogram",
    "Summary",
    "PromOpsError",
    "OperationDecodeError",
    "InvalidOperationError",
    "UNUSED",
    "Labels",
    "MetricType",
    "Operation",
    "CounterAction",
    "GaugeAction",
    "HistogramAction",
    "SummaryAction",
    "CounterOp",
    "GaugeOp",
    "HistogramOp",
    "SummaryOp",
    "label_set",
]
