"""
Main entrypoint for the Chat API.

This module assembles the FastAPI application, sets up logging, wires
the services to their SQLite-backed collections and includes the
routers.  The ``create_app`` function builds and configures the app,
which is then instantiated at module import time as ``app``, e.g.::

    uvicorn chat_api.app.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .api.router import router as api_router
from .core.config import Settings, settings
from .core.db import get_database_path, init_db
from .core.logging_config import setup_logging
from .core.realtime import Notifier
from .core.security import get_credential_verifier
from .core.store import message_collection, user_collection
from .services.message_service import MessageService
from .services.user_service import UserService


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Settings to use instead of the module-level ``settings``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    app_settings = app_settings or settings

    # Initialise logging before anything else so that the wiring below can
    # safely log messages.
    setup_logging(app_settings.log_level, app_settings.log_file)

    database_path = get_database_path(app_settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Creates the database file and tables if they do not exist yet.
        init_db(database_path)
        yield

    app = FastAPI(
        title=app_settings.project_name,
        version=app_settings.api_version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.user_service = UserService(
        user_collection(database_path),
        get_credential_verifier(app_settings.password_scheme),
    )
    app.state.message_service = MessageService(
        message_collection(database_path),
        suppress_list_errors=app_settings.suppress_message_list_errors,
    )
    app.state.notifier = Notifier(send_timeout=app_settings.notify_send_timeout)

    app.include_router(api_router)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
