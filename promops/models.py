"""Operation data models"""
import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import ClassVar, Dict, Optional, Tuple, Type, Union


Labels = Dict[str, str]

# Marks the value of an action that takes no argument
UNUSED = float("nan")


class MetricType(Enum):
    """Prometheus metric types"""
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"
    SUMMARY = "summary"


class _Action(IntEnum):
    """Base for per-kind action enumerations.

    Values are the wire codes. 0 is reserved for "unspecified" and is
    never a member. A verb keeps the same code in every kind.
    """

    @property
    def takes_argument(self) -> bool:
        """True when the action consumes the payload value"""
        return self.name in _ARGUMENT_ACTIONS


_ARGUMENT_ACTIONS = frozenset({"ADD", "SUB", "SET", "OBSERVE"})


class CounterAction(_Action):
    INC = 1
    ADD = 2
    REMOVE = 7
    RESET = 8


class GaugeAction(_Action):
    INC = 1
    ADD = 2
    SET = 3
    DEC = 4
    SUB = 5
    SET_TO_CURRENT_TIME = 6
    REMOVE = 7
    RESET = 8


class HistogramAction(_Action):
    REMOVE = 7
    RESET = 8
    OBSERVE = 9
    START_TIMER = 10
    ZERO = 11


class SummaryAction(_Action):
    REMOVE = 7
    RESET = 8
    OBSERVE = 9
    START_TIMER = 10


def label_set(*pairs: Tuple[str, str], **kwargs: str) -> Labels:
    """Build a label set from (key, value) pairs and keyword labels.

    Later duplicates win, keyword labels are applied last.
    """
    labels: Labels = {}
    for key, value in pairs:
        labels[key] = value
    labels.update(kwargs)
    return labels


@dataclass(frozen=True)
class _Payload:
    """A (value, action) pair restricted to one metric kind"""
    value: float
    action: _Action

    kind: ClassVar[MetricType]
    action_type: ClassVar[Type[_Action]]

    def __post_init__(self):
        # Coerce raw wire codes; raises ValueError for codes outside the kind
        object.__setattr__(self, "action", self.action_type(self.action))
        object.__setattr__(self, "value", float(self.value))

    @property
    def argument(self) -> Optional[float]:
        """The numeric argument, or None when the action takes none"""
        if self.action.takes_argument:
            return self.value
        return None

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        if self.action != other.action:
            return False
        # NaN sentinels compare equal to each other
        if math.isnan(self.value) and math.isnan(other.value):
            return True
        return self.value == other.value

    def __hash__(self):
        # Consistent with __eq__: every NaN hashes alike
        value = None if math.isnan(self.value) else self.value
        return hash((type(self), self.action, value))


@dataclass(frozen=True, eq=False)
class CounterOp(_Payload):
    kind: ClassVar[MetricType] = MetricType.COUNTER
    action_type: ClassVar[Type[_Action]] = CounterAction


@dataclass(frozen=True, eq=False)
class GaugeOp(_Payload):
    kind: ClassVar[MetricType] = MetricType.GAUGE
    action_type: ClassVar[Type[_Action]] = GaugeAction


@dataclass(frozen=True, eq=False)
class HistogramOp(_Payload):
    kind: ClassVar[MetricType] = MetricType.HISTOGRAM
    action_type: ClassVar[Type[_Action]] = HistogramAction


@dataclass(frozen=True, eq=False)
class SummaryOp(_Payload):
    kind: ClassVar[MetricType] = MetricType.SUMMARY
    action_type: ClassVar[Type[_Action]] = SummaryAction


Payload = Union[CounterOp, GaugeOp, HistogramOp, SummaryOp]

PAYLOAD_TYPES: Dict[MetricType, Type[_Payload]] = {
    MetricType.COUNTER: CounterOp,
    MetricType.GAUGE: GaugeOp,
    MetricType.HISTOGRAM: HistogramOp,
    MetricType.SUMMARY: SummaryOp,
}


@dataclass(frozen=True)
class Operation:
    """One intended mutation of a single metric series"""
    name: str
    labels: Labels = field(default_factory=dict)
    payload: Payload = None

    def __post_init__(self):
        if not isinstance(self.payload, _Payload):
            raise TypeError("Operation payload must be one of CounterOp, GaugeOp, HistogramOp, SummaryOp")
        # Own a copy so callers cannot mutate labels afterwards
        object.__setattr__(self, "labels", dict(self.labels or {}))

    @property
    def kind(self) -> MetricType:
        return self.payload.kind

    @property
    def action(self) -> _Action:
        return self.payload.action

    @property
    def value(self) -> float:
        return self.payload.value

    def to_dict(self) -> Dict:
        """Plain dict view, used for structured logging"""
        return {
            "name": self.name,
            "labels": dict(self.labels),
            "kind": self.kind.value,
            "action": self.action.name,
            "value": None if math.isnan(self.value) else self.value,
        }
