"""FastAPI application for the claim intake service."""

import contextlib
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI

# Load environment variables from .env file
load_dotenv()

from .. import __version__
from ..infrastructure.dependencies import ServiceContainer
from .endpoints import health, webhook

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the service container before serving and stop it afterwards."""
    container: ServiceContainer = app.state.container
    await container.start()

    yield  # Application runs here

    await container.stop()


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create the application around a (not yet started) service container.

    Args:
        container: Service container; built from the environment if omitted

    Returns:
        FastAPI application
    """
    application = FastAPI(
        title="Claim Intake API",
        description="WhatsApp webhook ingestion and claim deduplication for the fact-checking bot",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.container = container or ServiceContainer()

    application.include_router(health.router)
    application.include_router(webhook.router)
    return application


app = create_app()
