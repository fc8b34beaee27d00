"""Counter builder"""
from dataclasses import dataclass
from typing import ClassVar, Type

from ..models import CounterAction, CounterOp, Operation, _Payload
from .base import MetricBuilder


@dataclass(frozen=True)
class Counter(MetricBuilder):
    """Builds operations for a monotonically increasing counter.

    Example::

        batch.push(Counter.from_name("requests_total").with_labels({"route": "/health"}).inc())
    """
    payload_type: ClassVar[Type[_Payload]] = CounterOp

    def inc(self) -> Operation:
        """Increment the counter by 1"""
        return self._operation(CounterAction.INC, 1.0)

    def add(self, value: float) -> Operation:
        """Add an arbitrary value to the counter.

        Negative values are representable here; the consumer rejects them
        when applying the operation.
        """
        return self._operation(CounterAction.ADD, value)
