"""Replay operations onto prometheus_client metrics.

This is the consuming side of a batch: every operation is applied to a real
metric object keyed by name and kind. Illegal operations are reported and
skipped, the rest of the batch still applies.
"""
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import prometheus_client
from prometheus_client import CollectorRegistry

from .config import Config
from .logging_config import get_logger, log_batch_applied, log_operation_rejected, log_replay_failure
from .batch import PrometheusOperations
from .errors import InvalidOperationError
from .models import MetricType, Operation


logger = get_logger(__name__)

METRIC_CLASSES = {
    MetricType.COUNTER: prometheus_client.Counter,
    MetricType.GAUGE: prometheus_client.Gauge,
    MetricType.HISTOGRAM: prometheus_client.Histogram,
    MetricType.SUMMARY: prometheus_client.Summary,
}

# Actions applied to a single labelled child, keyed by action name
_CHILD_ACTIONS: Dict[str, Callable[[Any, float], None]] = {
    "INC": lambda child, value: child.inc(),
    "ADD": lambda child, value: child.inc(value),
    "DEC": lambda child, value: child.dec(),
    "SUB": lambda child, value: child.dec(value),
    "SET": lambda child, value: child.set(value),
    "SET_TO_CURRENT_TIME": lambda child, value: child.set_to_current_time(),
    "OBSERVE": lambda child, value: child.observe(value),
    # Looking the child up is enough to export it at zero
    "ZERO": lambda child, value: None,
}


@dataclass
class RegisteredMetric:
    """A metric created by the replayer"""
    kind: MetricType
    labelnames: Tuple[str, ...]
    collector: Any


class OperationReplayer:
    """Applies operations to metrics in a prometheus_client registry.

    Metrics are registered on first use. Label names come from the first
    operation seen for a name and stay fixed until the family is reset.
    """

    def __init__(self, config: Optional[Config] = None, registry: Optional[CollectorRegistry] = None):
        self.config = config or Config()
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, RegisteredMetric] = {}
        self.applied_count = 0
        self.rejected_count = 0

    def apply(self, operation: Operation) -> bool:
        """Apply one operation, returning False if it was rejected.

        Anything other than a rejection is logged and re-raised.
        """
        try:
            self._apply(operation)
        except (ValueError, KeyError) as e:
            self.rejected_count += 1
            log_operation_rejected(logger, operation.to_dict(), str(e))
            return False
        except Exception as e:
            log_replay_failure(logger, e, operation.to_dict())
            raise

        self.applied_count += 1
        return True

    def apply_batch(self, batch: PrometheusOperations) -> int:
        """Apply every operation in order and return how many were applied"""
        start_time = time.time()
        applied = 0
        for operation in batch:
            if self.apply(operation):
                applied += 1

        log_batch_applied(logger, applied, len(batch) - applied, time.time() - start_time)
        return applied

    def get_metric(self, name: str) -> Optional[RegisteredMetric]:
        """Get a registered metric by operation name"""
        return self._metrics.get(name)

    def render(self) -> bytes:
        """Render the registry in the Prometheus text exposition format"""
        return prometheus_client.generate_latest(self.registry)

    def _apply(self, operation: Operation) -> None:
        if not operation.name:
            raise InvalidOperationError("Metric name must not be empty", operation)

        action = operation.action.name
        if action == "RESET":
            self._reset(operation)
        elif action == "REMOVE":
            self._remove(operation)
        elif action == "START_TIMER":
            raise InvalidOperationError("start_timer cannot be replayed", operation)
        else:
            registered = self._lookup(operation, create=True)
            _CHILD_ACTIONS[action](self._child(registered, operation), operation.value)

    def _lookup(self, operation: Operation, create: bool) -> RegisteredMetric:
        registered = self._metrics.get(operation.name)
        if registered is None:
            if not create:
                raise InvalidOperationError(f"Metric {operation.name!r} is not registered", operation)
            return self._register(operation.name, operation.kind, tuple(sorted(operation.labels)))

        if registered.kind != operation.kind:
            raise InvalidOperationError(
                f"Metric {operation.name!r} is a {registered.kind.value}, not a {operation.kind.value}",
                operation,
            )
        return registered

    def _register(self, name: str, kind: MetricType, labelnames: Tuple[str, ...]) -> RegisteredMetric:
        kwargs = {"registry": self.registry}
        if kind == MetricType.HISTOGRAM:
            kwargs["buckets"] = self.config.histogram_buckets

        collector = METRIC_CLASSES[kind](name, self.config.default_help, labelnames, **kwargs)
        registered = RegisteredMetric(kind=kind, labelnames=labelnames, collector=collector)
        self._metrics[name] = registered

        logger.debug("Registered metric",
                     name=name,
                     kind=kind.value,
                     labelnames=list(labelnames),
                     event_type="metric_registered")
        return registered

    @staticmethod
    def _child(registered: RegisteredMetric, operation: Operation):
        if registered.labelnames:
            return registered.collector.labels(**operation.labels)
        if operation.labels:
            raise InvalidOperationError(f"Metric {operation.name!r} was registered without labels", operation)
        return registered.collector

    def _remove(self, operation: Operation) -> None:
        registered = self._lookup(operation, create=False)
        if not registered.labelnames:
            raise InvalidOperationError(f"Metric {operation.name!r} has no labelled series to remove", operation)
        if set(operation.labels) != set(registered.labelnames):
            raise InvalidOperationError(
                f"Labels {sorted(operation.labels)} do not match {list(registered.labelnames)}",
                operation,
            )
        registered.collector.remove(*(operation.labels[name] for name in registered.labelnames))

    def _reset(self, operation: Operation) -> None:
        # Replace the whole family with a fresh collector
        registered = self._lookup(operation, create=False)
        self.registry.unregister(registered.collector)
        del self._metrics[operation.name]
        self._register(operation.name, registered.kind, registered.labelnames)
