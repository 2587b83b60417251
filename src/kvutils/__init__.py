"""
Ambient utilities for the kvcheck harness

Provides:
- logging: console/JSON logging setup and context loggers
- metrics: Prometheus metrics for harness runs
- tracing: OpenTelemetry spans around run phases
"""

__version__ = "1.0.0"
__all__ = ["logging", "metrics", "tracing"]
