"""Test request metrics."""

import threading

from voicegate.monitoring.request_metrics import RequestCounters, RequestMetrics


class TestRequestCounters:
    """Test derived values."""

    def test_rates_are_zero_when_empty(self):
        """Test empty counters."""
        counters = RequestCounters()

        assert counters.avg_latency_ms == 0.0
        assert counters.cache_hit_rate == 0.0
        assert counters.error_rate == 0.0


class TestRequestMetrics:
    """Test recording and snapshot."""

    def test_should_aggregate_requests(self):
        """Test counts and latency."""
        metrics = RequestMetrics()
        metrics.record_request("chat", 10.0)
        metrics.record_request("voice", 30.0)
        metrics.record_error()

        snapshot = metrics.snapshot()
        assert snapshot["totalRequests"] == 2
        assert snapshot["chatRequests"] == 1
        assert snapshot["voiceRequests"] == 1
        assert snapshot["avgLatencyMs"] == 20.0
        assert snapshot["maxLatencyMs"] == 30.0
        assert snapshot["errorRate"] == 0.5

    def test_should_track_cache_and_languages(self):
        """Test cache and language counters."""
        metrics = RequestMetrics()
        metrics.record_cache(hit=True)
        metrics.record_cache(hit=False)
        metrics.record_cache(hit=False)
        metrics.record_language("ne-NP")
        metrics.record_language("ne-NP")

        snapshot = metrics.snapshot()
        assert snapshot["cacheHitRate"] == 0.3333
        assert snapshot["languages"] == {"ne-NP": 2}

    def test_reset(self):
        """Test reset clears counters."""
        metrics = RequestMetrics()
        metrics.record_request("chat", 5.0)
        metrics.reset()

        assert metrics.snapshot()["totalRequests"] == 0

    def test_concurrent_recording(self):
        """Test thread safety."""
        metrics = RequestMetrics()

        def record():
            for _ in range(500):
                metrics.record_request("chat", 1.0)

        threads = [threading.Thread(target=record) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert metrics.snapshot()["totalRequests"] == 2000
