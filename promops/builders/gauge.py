"""Gauge builder"""
from dataclasses import dataclass
from typing import ClassVar, Type

from ..models import GaugeAction, GaugeOp, Operation, _Payload
from .base import MetricBuilder


@dataclass(frozen=True)
class Gauge(MetricBuilder):
    """Builds operations for a gauge that can go up and down"""
    payload_type: ClassVar[Type[_Payload]] = GaugeOp

    def set(self, value: float) -> Operation:
        """Set the gauge to an arbitrary value"""
        return self._operation(GaugeAction.SET, value)

    def inc(self) -> Operation:
        """Increment the gauge by 1. Use add to increment by arbitrary values"""
        return self._operation(GaugeAction.INC, 1.0)

    def dec(self) -> Operation:
        """Decrement the gauge by 1. Use sub to decrement by arbitrary values"""
        return self._operation(GaugeAction.DEC, 1.0)

    def add(self, value: float) -> Operation:
        """Add a value to the gauge (negative values decrease it)"""
        return self._operation(GaugeAction.ADD, value)

    def sub(self, value: float) -> Operation:
        """Subtract a value from the gauge (negative values increase it)"""
        return self._operation(GaugeAction.SUB, value)

    def set_to_current_time(self) -> Operation:
        """Set the gauge to the current Unix time in seconds, at replay time"""
        return self._operation(GaugeAction.SET_TO_CURRENT_TIME)
