import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.db.prismic import create_prismic_client
from app.routers import posts, preview
from app.services.page_cache import page_cache
from app.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Spacetraveling API", description="Blog pages served from Prismic")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.prismic = create_prismic_client()
    logger.info(f"Prismic client ready for {settings.PRISMIC_API_ENDPOINT}")

    try:
        yield
    finally:
        await page_cache.shutdown()
        await app.state.prismic.aclose()
        logger.info("Prismic client closed")


app.router.lifespan_context = lifespan

app.include_router(posts.router)
app.include_router(preview.router)


@app.get("/")
async def root():
    return {"message": "Spacetraveling API is running"}
