import logging
from contextlib import asynccontextmanager

import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swiftshop.api.health import router as health_router
from swiftshop.api.routes_admin import router as admin_router
from swiftshop.api.routes_cart import router as cart_router
from swiftshop.api.routes_catalogue import router as catalogue_router
from swiftshop.api.routes_checkout import router as checkout_router
from swiftshop.api.routes_receipts import router as receipts_router
from swiftshop.config import settings
from swiftshop.db import SessionLocal, init_db
from swiftshop.services.idempotency_service import IdempotencyService
from swiftshop.utils.log import configure_logging

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger(__name__)


def purge_idempotency_job():
    db = SessionLocal()
    try:
        IdempotencyService(db).purge_expired()
    except Exception:
        log.exception("idempotency purge failed")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(reset=settings.RESET_DB)

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        purge_idempotency_job,
        "interval",
        seconds=settings.IDEMPOTENCY_PURGE_INTERVAL_SECONDS,
        id="purge_idempotency_keys",
    )
    scheduler.start()
    log.info("SwiftShop started")

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


app = FastAPI(title="SwiftShop - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(catalogue_router, prefix="/api/products", tags=["catalogue"])

app.include_router(cart_router, tags=["cart"])

app.include_router(checkout_router, prefix="/api/checkout", tags=["checkout"])

app.include_router(receipts_router, prefix="/api/receipts", tags=["receipts"])

app.include_router(admin_router, tags=["admin"])


if __name__ == "__main__":
    uvicorn.run("swiftshop.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
