from .common.errors import (
    BrowsableError,
    ErrorCode,
    NoRowsError,
    QueryExecutionError,
    QueryValidationError,
    RemoteQueryError,
)
from .execution.cursor import Cursor, ExecFunction
from .execution.sqlalchemy_executor import SQLAlchemyExecutor, SqlCursor
from .gateway import BrowsableGateway
from .hub import StudioHub
from .middleware import BrowsableMiddleware, install_browsable
from .options import CORS_HEADERS, BasicAuthCredentials, BrowsableOptions
from .remote import RemoteSqlCursor, get_exec, make_stub, remote_exec
from .security.auth import basic_authorization
from .security.validators import (
    QueryValidator,
    ValidationResult,
    compose_validators,
    create_ast_read_only_validator,
    create_max_length_validator,
    create_read_only_validator,
)

__all__ = [
    "BrowsableError",
    "ErrorCode",
    "NoRowsError",
    "QueryExecutionError",
    "QueryValidationError",
    "RemoteQueryError",
    "Cursor",
    "ExecFunction",
    "SQLAlchemyExecutor",
    "SqlCursor",
    "BrowsableGateway",
    "StudioHub",
    "BrowsableMiddleware",
    "install_browsable",
    "CORS_HEADERS",
    "BasicAuthCredentials",
    "BrowsableOptions",
    "RemoteSqlCursor",
    "get_exec",
    "make_stub",
    "remote_exec",
    "QueryValidator",
    "ValidationResult",
    "basic_authorization",
    "compose_validators",
    "create_ast_read_only_validator",
    "create_max_length_validator",
    "create_read_only_validator",
]
