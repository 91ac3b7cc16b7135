from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cafe_pos import __version__
from cafe_pos.config import Settings, settings
from cafe_pos.errors import install_error_handlers
from cafe_pos.logging import setup_json_logging
from cafe_pos.realtime import RealtimeHub
from cafe_pos.realtime import router as realtime_router
from cafe_pos.request_id import RequestIDMiddleware
from cafe_pos.routers import (
    auth,
    branches,
    categories,
    customers,
    dashboard,
    floors,
    kitchen,
    orders,
    payment_settings,
    payments,
    products,
    reports,
    sessions,
    tables,
    terminals,
)

ROUTERS = (
    auth.router,
    branches.router,
    terminals.router,
    sessions.router,
    floors.router,
    tables.router,
    categories.router,
    products.router,
    customers.router,
    orders.router,
    kitchen.router,
    payments.router,
    payment_settings.router,
    dashboard.router,
    reports.router,
    realtime_router,
)


def _configure_cors(app: FastAPI, allowed: Optional[str]) -> None:
    origins = [origin.strip() for origin in (allowed or "").split(",") if origin.strip()] or ["*"]
    # Wildcard origins must not be combined with credentialed requests.
    allow_credentials = "*" not in origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if not allow_credentials else origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app(config: Optional[Settings] = None, hub: Optional[RealtimeHub] = None) -> FastAPI:
    config = config or settings
    setup_json_logging(config.log_level)

    app = FastAPI(title="Cafe POS", version=__version__)
    app.state.hub = hub or RealtimeHub()
    app.add_middleware(RequestIDMiddleware)
    _configure_cors(app, config.allowed_origins)
    install_error_handlers(app, production=config.is_production)

    @app.get("/", tags=["root"])
    def read_root() -> dict:
        return {"status": "ok"}

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        return {"status": "healthy"}

    for router in ROUTERS:
        app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("cafe_pos.main:app", host="0.0.0.0", port=settings.port)
