"""
Main application entrypoint for the proxy service.

The configuration snapshot is resolved once, here, and handed to everything
that needs it. Routes registered on top of the operational ones:
  - /health: shallow liveness probe to confirm the process is running
  - /ready: readiness probe reporting whether every setting is well-formed
  - /metrics: Prometheus exposition endpoint for scraping
  - /api/v1/config: redacted configuration for the info page

Run with ``python -m oai_proxy.main``; the listening port is ``PORT``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, generate_latest
from starlette.responses import Response

from oai_proxy.api.v1.routes import api_router
from oai_proxy.core.config import ProxyConfig, get_config, validate_config
from oai_proxy.core.logging import get_logger, setup_logging

__version__ = "0.1.0"

# Initialize logging on module load
setup_logging()
logger = get_logger(__name__)


def create_app(config: Optional[ProxyConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Parameters
    ----------
    config : ProxyConfig, optional
        Settings snapshot for this app. Defaults to the process snapshot.

    Returns
    -------
    FastAPI
        Configured FastAPI app with metadata and base routes registered.
    """
    if config is None:
        config = get_config()

    app = FastAPI(
        title="OpenAI Reverse Proxy",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.config = config

    registry = CollectorRegistry()
    readiness_gauge = Gauge("proxy_readiness", "Readiness state", registry=registry)
    liveness_gauge = Gauge("proxy_liveness", "Liveness state", registry=registry)
    readiness_gauge.set(1)
    liveness_gauge.set(1)

    @app.get("/health", tags=["ops"])  # Shallow liveness
    def health() -> dict[str, str]:
        """Return basic liveness signal."""
        return {"status": "ok"}

    @app.get("/ready", tags=["ops"])  # Deeper readiness
    def ready() -> dict[str, str]:
        """Return readiness based on the loaded configuration.

        Malformed settings do not stop the proxy; they only mark it not ready
        so operators notice.
        """
        try:
            problems = validate_config(app.state.config)
        except Exception as e:
            logger.error(f"Readiness check failed: {e}", exc_info=True)
            readiness_gauge.set(0)
            return {"status": "not_ready", "error": str(type(e).__name__)}
        if problems:
            readiness_gauge.set(0)
            return {"status": "not_ready", "error": "invalid_configuration"}
        readiness_gauge.set(1)
        return {"status": "ready"}

    @app.get("/metrics", tags=["ops"])  # Prometheus exposition
    def metrics() -> Response:
        """Expose Prometheus metrics for scraping."""
        data = generate_latest(registry)
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def main() -> None:
    import uvicorn

    config = app.state.config
    logger.info(f"Starting proxy on port {config.port} ({config.environment})")
    uvicorn.run(app, host="0.0.0.0", port=int(config.port))


if __name__ == "__main__":
    main()
