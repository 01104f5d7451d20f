from fastapi import FastAPI, Request
from starlette.types import ASGIApp, Receive, Scope, Send

from browsable_sql.gateway import BrowsableGateway


class BrowsableMiddleware:
    """ASGI middleware that lets a gateway answer its own routes.

    Requests the gateway does not claim are passed to the wrapped application
    untouched. The gateway never reads the body of a request it passes on.
    """

    def __init__(self, app: ASGIApp, gateway: BrowsableGateway):
        self.app = app
        self.gateway = gateway

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        response = await self.gateway.handle(request)
        if response is None:
            await self.app(scope, receive, send)
            return

        await response(scope, receive, send)


def install_browsable(app: FastAPI, gateway: BrowsableGateway) -> FastAPI:
    """Installs ``gateway`` in front of ``app``'s own routes."""
    app.add_middleware(BrowsableMiddleware, gateway=gateway)
    return app
