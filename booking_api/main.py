# booking_api/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from booking_api import config
from booking_api.db import create_db_and_tables
from booking_api.routers import appointments_routes, availability_routes, businesses_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Database ready at %s", config.DATABASE_URL)
    yield


app = FastAPI(title="Booking API", lifespan=lifespan)

app.include_router(businesses_routes.router)
app.include_router(availability_routes.router)
app.include_router(appointments_routes.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
