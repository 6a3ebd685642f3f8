"""FastAPI application factory for the Sitepilot admin settings API.

Endpoints: /health, /metrics, /settings/*, /modules.
"""
from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request

from core import metrics
from core.config import get_config
from core.logging_setup import configure_logging
from core.modules import ModuleRegistry
from sitepilot.api.routes.settings import router as settings_router


def create_app(registry: ModuleRegistry | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):  # noqa: D401
        configure_logging(get_config().logging)
        yield

    app = FastAPI(
        title="Sitepilot Settings API",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    # None → built from config on first request
    app.state.registry = registry

    @app.get("/health")
    def health():  # noqa: D401
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics_snapshot():  # noqa: D401
        if not get_config().metrics.expose_endpoint:
            raise HTTPException(status_code=404, detail="metrics disabled")
        return metrics.snapshot()

    app.include_router(settings_router)

    @app.middleware("http")
    async def _metrics_mw(request: Request, call_next):  # noqa: D401
        start = time.time()
        labels = {"route": request.url.path, "method": request.method}
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            duration_ms = (time.time() - start) * 1000.0
            metrics.inc("api_request_total", labels)
            metrics.observe("api_request_latency_ms", duration_ms, labels)
            if status >= 400:
                metrics.inc(
                    "api_request_errors_total", labels | {"status": status}
                )

    return app


app = create_app()


def main() -> None:  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "sitepilot.api.app:app", host="127.0.0.1", port=8000, reload=False
    )


if __name__ == "__main__":  # pragma: no cover
    main()
