from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notifier.application.session import NotificationSession
from notifier.config import Settings, get_settings
from notifier.interfaces.api.routes import register_routes


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create the FastAPI application serving one notification session."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the upstream HTTP client and session, release them on shutdown."""

        client = httpx.AsyncClient(transport=transport)
        session = NotificationSession(client, settings=settings)
        await session.start()
        app.state.notification_session = session
        try:
            yield
        finally:
            app.state.notification_session = None
            await session.close()
            await client.aclose()

    app = FastAPI(lifespan=lifespan)

    # Allow the storefront client to call the adapter.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
