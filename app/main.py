from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.exceptions import BookingError, StoreUnavailable
from app.core.logger import logger
from app.db.session import init_db
from app.middleware.log_middleware import LogMiddleware

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME}")
    await init_db()
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)

from fastapi.middleware.cors import CORSMiddleware

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LogMiddleware)

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    headers = None
    if isinstance(exc, StoreUnavailable):
        headers = {"Retry-After": str(settings.STORE_RETRY_AFTER_SECONDS)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

@app.get("/")
async def root():
    return {"message": "Welcome to CareSlot API"}

from app.api.api import api_router
app.include_router(api_router, prefix=settings.API_V1_STR)
