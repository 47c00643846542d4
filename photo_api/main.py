import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from starlette.status import HTTP_405_METHOD_NOT_ALLOWED

from photo_api.config import get_settings
from photo_api.routers.photos import method_not_allowed_handler
from photo_api.routers.photos import router as photos_router

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # Resolve settings at startup so a bad configuration fails fast and the
    # authorization gate state is logged once.
    get_settings()
    yield


app = FastAPI(title="Photo API", lifespan=lifespan)

app.include_router(photos_router)

# Unrouted verbs on photo paths go through the auth gate, then get 400.
app.add_exception_handler(HTTP_405_METHOD_NOT_ALLOWED, method_not_allowed_handler)

__all__ = ["app"]
