"""
Storefront Checkout Application

Cart and checkout pages on top of the storefront JSON:API backend.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from .core.config import settings
from .routes import cart_router, checkout_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Storefront starting up...")
    logger.info(f"Backend URL: {settings.api_base_url}")
    logger.info(f"Service token configured: {bool(settings.api_token)}")
    yield
    logger.info("Storefront shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Cart and checkout pages for the storefront backend",
    version="1.0.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(cart_router)
app.include_router(checkout_router)


@app.get("/")
async def home():
    """Send visitors to their cart"""
    return RedirectResponse("/cart", status_code=307)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "storefront-checkout",
        "api_configured": settings.api_configured,
        "currency": settings.currency,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
