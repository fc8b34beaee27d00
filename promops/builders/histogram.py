"""Histogram builder"""
from dataclasses import dataclass
from typing import ClassVar, Type

from ..models import HistogramAction, HistogramOp, Operation, _Payload
from .base import MetricBuilder


@dataclass(frozen=True)
class Histogram(MetricBuilder):
    """Builds operations for a bucketed histogram"""
    payload_type: ClassVar[Type[_Payload]] = HistogramOp

    def observe(self, value: float) -> Operation:
        """Add a single observation to the histogram.

        Observations are usually positive or zero. Negative observations are
        accepted but break counter-reset detection on the sum of observations.
        """
        return self._operation(HistogramAction.OBSERVE, value)

    def start_timer(self) -> Operation:
        """Start a timer whose duration is observed in seconds"""
        return self._operation(HistogramAction.START_TIMER)

    def zero(self) -> Operation:
        """Initialize the series for the builder's labels to zero"""
        return self._operation(HistogramAction.ZERO)
