"""
Monitoring module.

Request counters exposed through the metrics endpoint.
"""

from voicegate.monitoring.request_metrics import RequestCounters, RequestMetrics

__all__ = ["RequestCounters", "RequestMetrics"]
