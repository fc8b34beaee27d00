"""Tests for replaying operations onto prometheus_client"""
from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from promops.config import Config
from promops import Counter, Gauge, Histogram, MetricType, PrometheusOperations, Summary
from promops.replay import _CHILD_ACTIONS, OperationReplayer


class TestOperationReplayer:
    """Test applying operations to a real registry"""

    def setup_method(self):
        """Setup test fixtures"""
        self.registry = CollectorRegistry()
        self.config = Config(histogram_buckets_str="0.5,1,5")
        self.replayer = OperationReplayer(self.config, self.registry)

    def sample(self, name, labels=None):
        return self.registry.get_sample_value(name, labels or {})

    def test_counter_inc_with_labels(self):
        """Test the counter is registered with the operation's label names"""
        counter = Counter.from_name("requests_total").with_labels({"route": "/health"})

        assert self.replayer.apply(counter.inc()) is True
        assert self.replayer.apply(counter.add(2.5)) is True

        assert self.sample("requests_total", {"route": "/health"}) == 3.5
        registered = self.replayer.get_metric("requests_total")
        assert registered.kind == MetricType.COUNTER
        assert registered.labelnames == ("route",)

    def test_counter_negative_add_rejected(self):
        """Test negative increments are rejected and reported, not raised"""
        counter = Counter.from_name("jobs")
        self.replayer.apply(counter.inc())

        assert self.replayer.apply(counter.add(-1.0)) is False
        assert self.replayer.rejected_count == 1
        assert self.sample("jobs_total") == 1.0

    def test_gauge_actions(self):
        """Test every value-changing gauge action"""
        gauge = Gauge.from_name("queue_depth")
        for operation in (gauge.set(10.0), gauge.inc(), gauge.dec(), gauge.add(-5.0), gauge.sub(2.0)):
            assert self.replayer.apply(operation) is True

        assert self.sample("queue_depth") == 3.0

    def test_gauge_set_to_current_time(self):
        """Test the time is taken when the operation is applied"""
        with patch("time.time", return_value=1700000000.0):
            self.replayer.apply(Gauge.from_name("last_seen").set_to_current_time())

        assert self.sample("last_seen") == 1700000000.0

    def test_histogram_observe(self):
        """Test observations land in the configured buckets"""
        histogram = Histogram.from_name("latency_seconds")
        self.replayer.apply(histogram.observe(0.25))
        self.replayer.apply(histogram.observe(2.0))

        assert self.sample("latency_seconds_count") == 2.0
        assert self.sample("latency_seconds_sum") == 2.25
        assert self.sample("latency_seconds_bucket", {"le": "0.5"}) == 1.0
        assert self.sample("latency_seconds_bucket", {"le": "5.0"}) == 2.0

    def test_histogram_zero(self):
        """Test zero exports the labelled series at zero"""
        self.replayer.apply(Histogram.from_name("latency_seconds").with_labels({"path": "/a"}).zero())

        assert self.sample("latency_seconds_count", {"path": "/a"}) == 0.0

    def test_summary_observe(self):
        """Test summary count and sum"""
        summary = Summary.from_name("payload_bytes").with_labels({"kind": "block"})
        self.replayer.apply(summary.observe(512.0))
        self.replayer.apply(summary.observe(0.0))

        assert self.sample("payload_bytes_count", {"kind": "block"}) == 2.0
        assert self.sample("payload_bytes_sum", {"kind": "block"}) == 512.0

    def test_start_timer_rejected(self):
        """Test timers have no replay meaning"""
        assert self.replayer.apply(Histogram.from_name("latency_seconds").start_timer()) is False
        assert self.replayer.apply(Summary.from_name("payload_bytes").start_timer()) is False
        assert self.replayer.rejected_count == 2

    def test_remove(self):
        """Test remove drops only the targeted series"""
        counter = Counter.from_name("hits")
        self.replayer.apply(counter.with_labels({"route": "/a"}).inc())
        self.replayer.apply(counter.with_labels({"route": "/b"}).inc())

        assert self.replayer.apply(counter.remove({"route": "/a"})) is True

        assert self.sample("hits_total", {"route": "/a"}) is None
        assert self.sample("hits_total", {"route": "/b"}) == 1.0

    def test_remove_with_wrong_labels(self):
        """Test remove with other label names is rejected"""
        gauge = Gauge.from_name("temperature").with_labels({"room": "lab"})
        self.replayer.apply(gauge.set(21.0))

        assert self.replayer.apply(gauge.remove({"floor": "1"})) is False
        assert self.sample("temperature", {"room": "lab"}) == 21.0

    def test_remove_on_unlabelled_metric_rejected(self):
        """Test remove needs a labelled metric"""
        gauge = Gauge.from_name("uptime")
        self.replayer.apply(gauge.set(5.0))

        assert self.replayer.apply(gauge.remove({})) is False
        assert self.sample("uptime") == 5.0

    def test_reset_labelled_family(self):
        """Test reset clears every series of the family"""
        counter = Counter.from_name("hits")
        self.replayer.apply(counter.with_labels({"route": "/a"}).inc())
        self.replayer.apply(counter.with_labels({"route": "/b"}).inc())

        assert self.replayer.apply(counter.reset()) is True

        assert self.sample("hits_total", {"route": "/a"}) is None
        assert self.sample("hits_total", {"route": "/b"}) is None

        self.replayer.apply(counter.with_labels({"route": "/a"}).inc())
        assert self.sample("hits_total", {"route": "/a"}) == 1.0

    def test_reset_unlabelled(self):
        """Test reset of an unlabelled metric returns it to zero"""
        counter = Counter.from_name("jobs")
        self.replayer.apply(counter.inc())
        self.replayer.apply(counter.inc())

        self.replayer.apply(counter.reset())

        assert self.sample("jobs_total") == 0.0

    def test_reset_unknown_metric_rejected(self):
        """Test reset and remove need a registered metric"""
        assert self.replayer.apply(Gauge.from_name("never_seen").reset()) is False
        assert self.replayer.apply(Gauge.from_name("never_seen").remove({"a": "b"})) is False

    def test_kind_conflict_rejected(self):
        """Test a name cannot change metric kind"""
        self.replayer.apply(Counter.from_name("shared").inc())

        assert self.replayer.apply(Gauge.from_name("shared").set(1.0)) is False
        assert self.replayer.apply(Gauge.from_name("shared").reset()) is False

    def test_label_mismatch_rejected(self):
        """Test label names are fixed by the first operation"""
        self.replayer.apply(Counter.from_name("c").with_labels({"a": "1"}).inc())

        assert self.replayer.apply(Counter.from_name("c").with_labels({"b": "1"}).inc()) is False
        assert self.replayer.apply(Counter.from_name("c").inc()) is False

    def test_labels_on_unlabelled_metric_rejected(self):
        """Test labels cannot be added after an unlabelled first use"""
        self.replayer.apply(Gauge.from_name("g").set(1.0))

        assert self.replayer.apply(Gauge.from_name("g").with_labels({"a": "1"}).set(2.0)) is False

    def test_unexpected_failure_is_logged_and_raised(self):
        """Test errors other than rejections propagate after logging"""
        def broken_inc(child, value):
            raise RuntimeError("collector broken")

        with patch.dict(_CHILD_ACTIONS, {"INC": broken_inc}), \
                patch("promops.replay.log_replay_failure") as log_failure:
            with pytest.raises(RuntimeError, match="collector broken"):
                self.replayer.apply(Counter.from_name("jobs").inc())

        log_failure.assert_called_once()
        assert log_failure.call_args[0][2]["name"] == "jobs"
        assert self.replayer.rejected_count == 0
        assert self.replayer.applied_count == 0

    def test_invalid_names_rejected(self):
        """Test empty names are reported, not raised"""
        assert self.replayer.apply(Counter.from_name("").inc()) is False

    def test_apply_batch_continues_after_rejection(self):
        """Test one bad operation does not stop the batch"""
        batch = PrometheusOperations([
            Counter.from_name("a").inc(),
            Counter.from_name("a").add(-3.0),
            Counter.from_name("b").add(123.456),
        ])

        applied = self.replayer.apply_batch(batch)

        assert applied == 2
        assert self.replayer.applied_count == 2
        assert self.replayer.rejected_count == 1
        assert self.sample("a_total") == 1.0
        assert self.sample("b_total") == 123.456

    def test_order_matters(self):
        """Test operations on one series apply in batch order"""
        gauge = Gauge.from_name("g")
        batch = PrometheusOperations([gauge.set(5.0), gauge.inc(), gauge.set(1.0)])

        self.replayer.apply_batch(batch)

        assert self.sample("g") == 1.0

    def test_decoded_batch_replay(self):
        """Test bytes from a producer replay on the consumer side"""
        producer = PrometheusOperations()
        producer.push(Counter.from_name("requests_total").with_labels({"route": "/health"}).inc())
        producer.push(Gauge.from_name("head_block_drift").set(12.0))
        producer.push(Histogram.from_name("block_size").observe(0.75))

        consumed = PrometheusOperations.from_bytes(producer.to_bytes())

        assert self.replayer.apply_batch(consumed) == 3
        assert self.sample("requests_total", {"route": "/health"}) == 1.0
        assert self.sample("head_block_drift") == 12.0
        assert self.sample("block_size_bucket", {"le": "1.0"}) == 1.0

    def test_render(self):
        """Test the exposition output lists replayed metrics"""
        self.replayer.apply(Gauge.from_name("queue_depth").with_labels({"queue": "blocks"}).set(7.0))

        output = self.replayer.render().decode()

        assert "# TYPE queue_depth gauge" in output
        assert 'queue_depth{queue="blocks"} 7.0' in output

    def test_default_registry_is_private(self):
        """Test replayers do not share metrics by default"""
        first = OperationReplayer(self.config)
        second = OperationReplayer(self.config)

        first.apply(Counter.from_name("jobs").inc())

        assert second.apply(Counter.from_name("jobs").inc()) is True
        assert first.registry is not second.registry
