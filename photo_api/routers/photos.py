import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_200_OK,
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
)

from photo_api.config import get_settings
from photo_api.deps import get_photo_handler, get_principal, security
from photo_api.errors import (
    DeleteFailedError,
    NotOwnerError,
    PhotoNotFoundError,
    UnsupportedMethodError,
)
from photo_api.handler import (
    PHOTO_ROUTE,
    PhotoHandler,
    check_method,
    photo_name,
)
from photo_api.models import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

SAVE_FAILED = "Failed to save image."

_PHOTO_PATH = re.compile(rf"^{re.escape(PHOTO_ROUTE)}(/[^/]+)?$")


def _detail(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


def _not_found() -> JSONResponse:
    return _detail(HTTP_404_NOT_FOUND, "Photo not found")


def _unauthorized() -> JSONResponse:
    return _detail(HTTP_401_UNAUTHORIZED, "Unauthorized")


@router.get("/photo")
@router.get("/photo/{photo_id}")
def get_photo(
    request: Request,
    principal: Annotated[Principal | None, Depends(get_principal)],
    handler: Annotated[PhotoHandler, Depends(get_photo_handler)],
) -> Response:
    name = photo_name(request.path_params)
    try:
        photo = handler.get_photo(name, principal)
    except PhotoNotFoundError:
        return _not_found()
    except NotOwnerError:
        return _unauthorized()
    except Exception:
        logger.exception("Failed to get photo %s", name)
        return _not_found()
    return Response(
        content=photo.data, status_code=HTTP_200_OK, media_type=photo.content_type
    )


@router.post("/photo")
@router.post("/photo/{photo_id}")
async def post_photo(
    request: Request,
    principal: Annotated[Principal | None, Depends(get_principal)],
    handler: Annotated[PhotoHandler, Depends(get_photo_handler)],
) -> JSONResponse:
    """
    Store the raw image in the request body and return its canonical URL.
    """
    try:
        body = await request.body()
        created = await run_in_threadpool(
            handler.post_photo,
            body,
            principal,
            request.url.scheme,
            request.url.netloc,
        )
    except Exception:
        logger.exception("Failed to save image")
        return _detail(HTTP_400_BAD_REQUEST, SAVE_FAILED)
    return JSONResponse(
        status_code=HTTP_201_CREATED,
        content=created.url,
        headers={"Location": created.url},
    )


@router.delete("/photo")
@router.delete("/photo/{photo_id}")
def delete_photo(
    request: Request,
    principal: Annotated[Principal | None, Depends(get_principal)],
    handler: Annotated[PhotoHandler, Depends(get_photo_handler)],
) -> Response:
    name = photo_name(request.path_params)
    try:
        handler.delete_photo(name, principal)
    except PhotoNotFoundError:
        return _not_found()
    except NotOwnerError:
        return _unauthorized()
    except DeleteFailedError as exc:
        return _detail(HTTP_400_BAD_REQUEST, str(exc))
    except Exception:
        logger.exception("Failed to delete photo %s", name)
        return _detail(HTTP_400_BAD_REQUEST, "Bad Request")
    return Response(status_code=HTTP_200_OK)


async def method_not_allowed_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """
    Turn a 405 on a photo path into the photo API's own answer: the caller
    must pass the authorization gate first, then any verb other than
    get/post/delete is rejected with 400.
    """
    if not _PHOTO_PATH.match(request.url.path):
        return await http_exception_handler(request, exc)
    settings = request.app.dependency_overrides.get(get_settings, get_settings)()
    try:
        get_principal(await security(request), settings)
    except HTTPException as auth_exc:
        return await http_exception_handler(request, auth_exc)
    try:
        check_method(request.method)
    except UnsupportedMethodError as method_exc:
        return _detail(HTTP_400_BAD_REQUEST, str(method_exc))
    return await http_exception_handler(request, exc)
