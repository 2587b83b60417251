"""
HTTP exposition of harness metrics.

A campaign of many runs can be watched from Prometheus while it executes;
the server lives on a daemon thread and is shut down when the campaign
ends.
"""

import logging

from prometheus_client import REGISTRY, CollectorRegistry, start_http_server

logger = logging.getLogger(__name__)


class MetricsPublisher:
    """Serve ``registry`` on ``http://<addr>:<port>/metrics``."""

    def __init__(
        self,
        port: int = 9091,
        addr: str = "0.0.0.0",
        registry: CollectorRegistry | None = None,
    ):
        self.port = port
        self.addr = addr
        self.registry = registry or REGISTRY
        self._server = None

    def start(self) -> None:
        if self._server is not None:
            logger.warning(f"Metrics server already serving on port {self.port}")
            return

        try:
            server, _thread = start_http_server(self.port, addr=self.addr, registry=self.registry)
        except OSError as e:
            raise RuntimeError(f"Metrics server could not bind port {self.port}: {e}") from e

        self._server = server
        logger.info(f"Serving metrics on {self.addr}:{self.port}/metrics")

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._server = None
        logger.info("Metrics server stopped")

    def is_started(self) -> bool:
        return self._server is not None
