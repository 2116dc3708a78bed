import logging
import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles

from tailorshop.config import settings
from tailorshop.db import close_pool, get_pool, init_schema
from tailorshop.errors import register_error_handlers
from tailorshop.metrics import get_metrics_bytes, get_metrics_content_type
from tailorshop.redis_client import close_redis
from tailorshop.routes import (
    admin_customers,
    admin_dashboard,
    admin_inventory,
    admin_orders,
    admin_staff,
    auth,
    cutting_master,
    public,
    shops,
    tailor,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.init_schema_on_startup:
        pool = await get_pool()
        await init_schema(pool)
        logger.info("Schema ready.")
    yield
    await close_redis()
    await close_pool()


app = FastAPI(title="Tailor Shop API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)

for module in (
    auth,
    shops,
    public,
    admin_dashboard,
    admin_customers,
    admin_orders,
    admin_inventory,
    admin_staff,
    tailor,
    cutting_master,
):
    app.include_router(module.router)

if not settings.photo_bucket:
    os.makedirs(settings.photo_dir, exist_ok=True)
    app.mount(settings.photo_base_url, StaticFiles(directory=settings.photo_dir), name="photos")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(
        content=get_metrics_bytes(),
        media_type=get_metrics_content_type(),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
