"""Base metric builder"""
from dataclasses import dataclass, field, replace
from typing import ClassVar, Mapping, Optional, Type

from ..models import Labels, Operation, UNUSED, _Action, _Payload


@dataclass(frozen=True)
class MetricBuilder:
    """Immutable factory of Operations for one metric name.

    Builders never validate: empty names, negative counter increments and
    odd label keys are passed through for the consumer to reject.
    """
    name: str
    labels: Labels = field(default_factory=dict)

    payload_type: ClassVar[Type[_Payload]]

    def __post_init__(self):
        if not hasattr(type(self), "payload_type"):
            raise TypeError(f"{type(self).__name__} is abstract, use Counter, Gauge, Histogram or Summary")
        object.__setattr__(self, "labels", dict(self.labels or {}))

    @classmethod
    def from_name(cls, name: str) -> "MetricBuilder":
        """Create a builder for ``name`` with an empty label set"""
        return cls(name)

    def with_labels(self, labels: Optional[Mapping[str, str]]) -> "MetricBuilder":
        """Return a new builder whose label set is replaced by ``labels``"""
        return replace(self, labels=dict(labels or {}))

    def _operation(self, action: _Action, value: float = UNUSED, labels: Optional[Mapping[str, str]] = None) -> Operation:
        if labels is None:
            labels = self.labels
        return Operation(
            name=self.name,
            labels=dict(labels),
            payload=self.payload_type(value=value, action=action),
        )

    def remove(self, labels: Mapping[str, str]) -> Operation:
        """Remove the series identified by ``labels``.

        The builder's own labels are ignored for this operation.
        """
        return self._operation(self.payload_type.action_type.REMOVE, labels=labels or {})

    def reset(self) -> Operation:
        """Reset every series of the metric family"""
        return self._operation(self.payload_type.action_type.RESET, labels={})
