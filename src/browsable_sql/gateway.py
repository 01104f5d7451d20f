"""Gateway core.

``BrowsableGateway.handle`` answers the raw-query and studio routes, matched by
path suffix so a host may mount them under any prefix. Anything else yields
``None`` ("not my route") so the host can apply its own routing.
"""
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import ValidationError

from browsable_sql.common.errors import (
    BrowsableError,
    InvalidRequestError,
    QueryExecutionError,
    QueryValidationError,
)
from browsable_sql.common.logger import request_context
from browsable_sql.execution.cursor import ExecFunction
from browsable_sql.models.query import QueryRequest, RawQueryBody, ResponseEnvelope
from browsable_sql.models.studio import StudioCommand, StudioQueryCommand, studio_command_adapter
from browsable_sql.options import BrowsableOptions
from browsable_sql.security.auth import check_auth
from browsable_sql.security.validators import ValidationResult
from browsable_sql.services.query import QueryService
from browsable_sql.services.studio import StudioService
from browsable_sql.studio_page import render_studio_page

logger = logging.getLogger(__name__)

RAW_QUERY_SUFFIX = "/query/raw"
STUDIO_SUFFIX = "/studio"
REQUEST_ID_HEADER = "X-Request-ID"


def _request_body_error(e: ValueError) -> str:
    if isinstance(e, ValidationError):
        errors = e.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0]["loc"])
            detail = f"{location}: {errors[0]['msg']}" if location else errors[0]["msg"]
            return f"Invalid request body: {detail}"
    return f"Invalid request body: {e}"


class BrowsableGateway:
    """Exposes an execution adapter over HTTP.

    Args:
        exec_fn (ExecFunction): ``(sql, *params) -> Cursor``, local or remote.
        options (Optional[BrowsableOptions]): Auth, studio and validator settings.
    """

    def __init__(self, exec_fn: ExecFunction, options: Optional[BrowsableOptions] = None):
        self.options = options or BrowsableOptions()
        self.validator = self.options.validator
        self.query_service = QueryService(exec_fn)
        self.studio_service = StudioService(exec_fn)

    @property
    def route_suffixes(self) -> Tuple[str, ...]:
        if self.options.disable_studio:
            return (RAW_QUERY_SUFFIX,)
        return (RAW_QUERY_SUFFIX, STUDIO_SUFFIX)

    def match_route(self, path: str) -> Optional[str]:
        for suffix in self.route_suffixes:
            if path.endswith(suffix):
                return suffix
        return None

    async def handle(self, request: Request) -> Optional[Response]:
        """Handles a request, or returns None when the route is not ours."""
        route = self.match_route(request.url.path)
        if route is None:
            return None

        if request.method == "OPTIONS":
            return Response(status_code=204, headers=dict(self.options.cors_headers))

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        with request_context(request_id, request.method, route):
            logger.debug("Handling %s", request.url.path)
            response = await self._dispatch(route, request)

        if response is not None:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response

    async def _dispatch(self, route: str, request: Request) -> Optional[Response]:
        auth_error = check_auth(request, self.options)
        if auth_error is not None:
            return auth_error

        if route == RAW_QUERY_SUFFIX:
            if request.method == "POST":
                return await self._handle_raw_query(request)
            return None

        if request.method == "GET":
            return HTMLResponse(render_studio_page())
        if request.method == "POST":
            return await self._handle_studio(request)
        return None

    # Raw query route

    def _envelope_response(self, envelope: ResponseEnvelope, status_code: int) -> JSONResponse:
        return JSONResponse(
            envelope.model_dump(),
            status_code=status_code,
            headers=dict(self.options.cors_headers),
        )

    def _failure_response(self, error: BrowsableError, status_code: int) -> JSONResponse:
        logger.info("Raw query failed with %d: %s", status_code, error.message, extra={"error_code": error.error_code.value})
        return self._envelope_response(ResponseEnvelope.failure(error.message), status_code)

    async def _handle_raw_query(self, request: Request) -> Response:
        try:
            statements = self._parse_raw_query(await self._read_json(request))
            self.validate_statements(query.sql for query in statements)
            data = await self.execute_transaction(statements)
        except (InvalidRequestError, QueryValidationError) as e:
            return self._failure_response(e, 400)
        except QueryExecutionError as e:
            return self._failure_response(e, 500)

        return self._envelope_response(ResponseEnvelope.success(data), 200)

    async def _read_json(self, request: Request) -> Any:
        try:
            return await request.json()
        except ValueError:
            raise InvalidRequestError("Invalid JSON body")

    def _parse_raw_query(self, payload: Any) -> List[QueryRequest]:
        try:
            return RawQueryBody.model_validate(payload).statements()
        except ValueError as e:
            raise InvalidRequestError(_request_body_error(e)) from e

    # Studio route

    async def _handle_studio(self, request: Request) -> Response:
        try:
            command = studio_command_adapter.validate_python(await self._read_json(request))
        except (InvalidRequestError, ValidationError):
            return JSONResponse({"error": "Invalid request"})

        try:
            result = await self.execute_studio_command(command)
        except BrowsableError as e:
            logger.info("Studio command failed: %s", e.message, extra={"error_code": e.error_code.value})
            return JSONResponse({"error": e.message})

        return JSONResponse({"result": result})

    # Operations

    def validate_statements(self, statements: Iterable[str]) -> None:
        """Applies the validator to every statement before anything runs.

        Raises:
            QueryValidationError: On the first rejected statement.
        """
        if self.validator is None:
            return

        for statement in statements:
            result = self.validator(statement)
            if not isinstance(result, ValidationResult):
                result = ValidationResult.model_validate(result)
            if not result.is_valid:
                logger.warning("Statement rejected by validator: %s", result.error)
                raise QueryValidationError(result.error, statement=statement)

    async def execute_query(
        self,
        sql: str,
        params: Sequence[Any] = (),
        is_raw: bool = False,
    ) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        return await self.query_service.execute_query(sql, params, is_raw=is_raw)

    async def execute_transaction(self, queries: Sequence[QueryRequest]) -> List[Dict[str, Any]]:
        return await self.query_service.execute_transaction(queries)

    async def execute_studio_command(self, command: StudioCommand) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Validates every statement of the command, then runs it."""
        if isinstance(command, StudioQueryCommand):
            self.validate_statements([command.statement])
        else:
            self.validate_statements(command.statements)
        return await self.studio_service.execute_command(command)
