"""Summary builder"""
from dataclasses import dataclass
from typing import ClassVar, Type

from ..models import Operation, SummaryAction, SummaryOp, _Payload
from .base import MetricBuilder


@dataclass(frozen=True)
class Summary(MetricBuilder):
    """Builds operations for a summary (count and sum of observations)"""
    payload_type: ClassVar[Type[_Payload]] = SummaryOp

    def observe(self, value: float) -> Operation:
        """Add a single observation to the summary"""
        return self._operation(SummaryAction.OBSERVE, value)

    def start_timer(self) -> Operation:
        """Start a timer whose duration is observed in seconds"""
        return self._operation(SummaryAction.START_TIMER)
