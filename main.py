from contextlib import asynccontextmanager

from fastapi import FastAPI

from bazaarfly.config import get_settings
from bazaarfly.infrastructure.database import engine, initialize_database
from bazaarfly.infrastructure.email import SMTPMailer
from bazaarfly.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables and the shared mailer; release both on shutdown."""

    initialize_database()
    app.state.mailer = SMTPMailer(get_settings())
    yield
    app.state.mailer.shutdown()
    engine.dispose()


def create_app() -> FastAPI:
    """Build the Bazaarfly notification API."""

    app = FastAPI(title="Bazaarfly notifications", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
