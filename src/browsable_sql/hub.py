"""Studio hub: one studio endpoint in front of many storage instances.

GET without ``?id=`` shows a form asking for an instance name; GET with
``?id=`` serves the studio page; POST runs the studio command against the
instance named by ``?id=`` (``"default"`` when absent).
"""
import html
import logging
from typing import Callable, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError

from browsable_sql.common.errors import BrowsableError
from browsable_sql.gateway import BrowsableGateway
from browsable_sql.models.studio import studio_command_adapter
from browsable_sql.options import BasicAuthCredentials
from browsable_sql.security.auth import check_basic_auth
from browsable_sql.studio_page import render_homepage, render_studio_page

logger = logging.getLogger(__name__)

DEFAULT_INSTANCE = "default"

GatewayResolver = Callable[[str], BrowsableGateway]


class StudioHub:
    """
    Args:
        resolve_gateway (GatewayResolver): Maps an instance name to its gateway.
        basic_auth (Optional[BasicAuthCredentials]): Protects the hub when given.
    """

    def __init__(self, resolve_gateway: GatewayResolver, basic_auth: Optional[BasicAuthCredentials] = None):
        self.resolve_gateway = resolve_gateway
        self.basic_auth = basic_auth

    async def handle(self, request: Request) -> Response:
        if self.basic_auth is not None:
            auth_error = check_basic_auth(request, self.basic_auth, {})
            if auth_error is not None:
                return auth_error

        instance = request.query_params.get("id")

        if request.method == "GET":
            if not instance:
                return HTMLResponse(render_homepage())
            return HTMLResponse(render_studio_page(title=f"SQL Studio - {html.escape(instance)}"))

        if request.method == "POST":
            try:
                command = studio_command_adapter.validate_python(await request.json())
            except (ValueError, ValidationError):
                return JSONResponse({"error": "Invalid request"})

            gateway = self.resolve_gateway(instance or DEFAULT_INSTANCE)
            try:
                result = await gateway.execute_studio_command(command)
            except BrowsableError as e:
                logger.warning("Studio command failed for instance %s: %s", instance or DEFAULT_INSTANCE, e)
                return JSONResponse({"error": e.message})
            return JSONResponse({"result": result})

        return PlainTextResponse("Method not allowed", status_code=405)
