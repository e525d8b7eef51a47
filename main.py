from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from tinylink_app.config import settings
from tinylink_app.logging_config import setup_logging
from tinylink_app.dependencies import get_link_store
from tinylink_app.store.factory import LinkStoreFactory
from tinylink_app.store.strategies import LinkStore
from tinylink_app.api.v1 import links, redirect

logger = setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the link store when the process shuts down"""
    logger.info("%s %s starting (%s)", settings.app_name, settings.app_version, settings.environment)
    yield
    await LinkStoreFactory.close_instance()
    get_link_store.cache_clear()
    logger.info("%s stopped", settings.app_name)


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A URL shortener with click counting, built with FastAPI",
    debug=settings.debug,
    lifespan=lifespan
)


@app.get("/healthz")
def healthz():
    """Liveness probe"""
    return {"ok": True, "version": settings.app_version}


@app.get("/health")
async def health_check(store: LinkStore = Depends(get_link_store)):
    """Health check endpoint, including the link store"""
    healthy = await store.health_check()
    return {
        "status": "healthy" if healthy else "unhealthy",
        "environment": settings.environment
    }




######## Include routers
app.include_router(links.router, prefix="/api")
# Catch-all /{code} goes last so it never shadows the routes above
app.include_router(redirect.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
