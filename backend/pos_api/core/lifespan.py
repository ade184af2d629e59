"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.config.settings import settings
from shared.config.logging import setup_logging, pos_logger as logger
from pos_api.seed import seed_customers, seed_menu
from pos_api.services.catalog.menu_catalog import MenuCatalog
from pos_api.services.crm.customer_directory import InMemoryCustomerDirectory
from pos_api.services.domain.dispatch_service import HttpAddressResolver
from pos_api.services.terminal import PosTerminal


def build_terminal(address_resolver: HttpAddressResolver | None = None) -> PosTerminal:
    """Terminal over the seed menu and CRM."""
    return PosTerminal(
        MenuCatalog(seed_menu()),
        InMemoryCustomerDirectory(seed_customers()),
        address_resolver=address_resolver,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    # Initialize logging
    setup_logging()

    # Validate configuration before startup
    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(f"Production configuration errors: {'; '.join(config_errors)}")
        logger.warning("Running with invalid configuration (acceptable for development only)")

    logger.info("Starting POS API", port=settings.api_port, env=settings.environment)

    # Address lookups are optional: without a URL the operator types addresses in
    address_resolver = HttpAddressResolver() if settings.address_lookup_url else None
    if getattr(app.state, "terminal", None) is None:
        app.state.terminal = build_terminal(address_resolver)
    logger.info("Terminal ready", menu_items=len(app.state.terminal.catalog))

    yield

    # Shutdown
    logger.info("Shutting down POS API")
    if address_resolver is not None:
        await address_resolver.close()
        logger.info("Address lookup client closed")
