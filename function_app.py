"""
Azure Functions entry point: serves the photo API as an HTTP-triggered function.
The app enforces its own bearer-token authorization, so the function key
requirement is turned off.
"""

import azure.functions as func

from photo_api.main import app as fastapi_app

app = func.AsgiFunctionApp(app=fastapi_app, http_auth_level=func.AuthLevel.ANONYMOUS)
