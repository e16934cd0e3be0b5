import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skuhub.api.health import router as health_router
from skuhub.api.routes_barcodes import router as barcodes_router
from skuhub.api.routes_pricing import router as pricing_router
from skuhub.api.routes_products import router as products_router
from skuhub.api.routes_skus import router as skus_router
from skuhub.config import settings
from skuhub.db import init_db
from skuhub.utils.background import scheduler
from skuhub.utils.logging import get_logger

log = get_logger("skuhub.app", "APP")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup; RESET_DB=1 in tests/CI forces a clean schema
    init_db(reset=os.environ.get("RESET_DB", "0") in ("1", "true", "True"))

    # runs fire-and-forget work (template usage tracking) off the request thread
    scheduler.start()
    log.info("background scheduler started")

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


app = FastAPI(title="skuhub - Barcode & SKU engine", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(skus_router, tags=["skus"])

app.include_router(barcodes_router, tags=["barcodes"])

app.include_router(pricing_router, tags=["pricing"])

app.include_router(products_router, tags=["products"])
