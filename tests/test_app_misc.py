from fastapi import FastAPI
from fastapi.testclient import TestClient

from photo_api.main import app
from photo_api.routers.photos import method_not_allowed_handler

NOT_FOUND = 404
METHOD_NOT_ALLOWED = 405


def test_app_instance_exists() -> None:
    assert app is not None


def test_root_returns_404() -> None:
    client = TestClient(app)
    response = client.get("/")
    assert response.status_code == NOT_FOUND


def test_photo_routes_registered() -> None:
    paths = {route.path for route in app.routes}  # type: ignore[attr-defined]
    assert {"/api/photo", "/api/photo/{photo_id}"} <= paths


def test_function_app_wraps_fastapi_app() -> None:
    import azure.functions as func

    import function_app

    assert isinstance(function_app.app, func.AsgiFunctionApp)


def test_method_not_allowed_elsewhere_is_unchanged() -> None:
    other = FastAPI()
    other.get("/health")(lambda: {"status": "ok"})
    other.add_exception_handler(METHOD_NOT_ALLOWED, method_not_allowed_handler)
    client = TestClient(other)
    response = client.post("/health")
    assert response.status_code == METHOD_NOT_ALLOWED
    assert response.json() == {"detail": "Method Not Allowed"}
