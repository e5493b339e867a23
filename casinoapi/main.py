import logging

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.middleware.cors import CORSMiddleware

from casinoapi import containers
from casinoapi.config import settings
from casinoapi.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from casinoapi.core.exceptions import BaseAPIException
from casinoapi.logging_config import setup_logging
from casinoapi.routers import balance_router, health_router, promotion_router

load_dotenv("casinoapi/.env")
setup_logging(settings.LOG_LEVEL, sql_echo=settings.DEBUG)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)
app.container = containers.Container()  # type: ignore

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Request: {request.method} {request.url}")
    response = await call_next(request)
    logger.info(f"Response: {response.status_code}")
    return response


app.add_exception_handler(BaseAPIException, handle_base_api_exception)
app.add_exception_handler(HTTPException, handle_http_exception)
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(Exception, handle_unexpected_error)


@app.get("/")
def hello() -> dict:
    return {"message": "Hello World!"}


app.include_router(health_router.router, prefix=settings.API_V1_STR)
app.include_router(balance_router.router, prefix=settings.API_V1_STR)
app.include_router(promotion_router.router, prefix=settings.API_V1_STR)

handler = Mangum(app)
