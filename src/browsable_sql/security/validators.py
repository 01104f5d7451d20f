"""Statement validators.

A validator is a plain callable ``(sql) -> ValidationResult``. It receives the
statement text exactly as the client sent it; any normalization is its own
business. The gateway only looks at ``is_valid`` and forwards ``error``.
"""
from typing import Callable, Optional, Sequence

import sqlglot
from sqlglot import expressions as exp
from sqlglot.errors import SqlglotError
from pydantic import BaseModel, ConfigDict


class ValidationResult(BaseModel):
    """Outcome of validating one statement."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def reject(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)


QueryValidator = Callable[[str], ValidationResult]

WRITE_OPERATIONS: Sequence[str] = (
    "insert",
    "update",
    "delete",
    "create",
    "drop",
    "alter",
    "truncate",
    "replace",
    "attach",
    "detach",
)

DANGEROUS_FUNCTIONS: Sequence[str] = (
    "load_extension",
    "sqlite_compileoption",
    "pragma",
)

_FORBIDDEN_NODES = (
    exp.Insert, exp.Update, exp.Delete, exp.Drop, exp.Alter,
    exp.TruncateTable, exp.Command, exp.Create, exp.Merge,
)


def create_read_only_validator(
    write_operations: Sequence[str] = WRITE_OPERATIONS,
    dangerous_functions: Sequence[str] = DANGEROUS_FUNCTIONS,
) -> QueryValidator:
    """Keyword based read-only validator.

    Rejects statements starting with a write keyword and statements mentioning
    a dangerous SQLite function anywhere in their text. This is a text check,
    not a parser: ``SELECT 'pragma'`` is rejected too.
    """

    def validate(sql: str) -> ValidationResult:
        normalized_sql = sql.strip().lower()

        for operation in write_operations:
            if normalized_sql.startswith(operation):
                return ValidationResult.reject(f"Write operation not allowed: {operation.upper()}")

        for func in dangerous_functions:
            if func in normalized_sql:
                return ValidationResult.reject(f"Function not allowed: {func}")

        return ValidationResult.ok()

    return validate


def create_ast_read_only_validator(dialect: Optional[str] = None) -> QueryValidator:
    """Read-only validator using sqlglot AST analysis.

    Allows only SELECT statements (including CTEs and UNIONs) and rejects any
    statement containing DML or DDL nodes. Text that does not parse is rejected.

    Args:
        dialect (Optional[str]): SQL dialect passed to sqlglot (e.g. "sqlite", "postgres").
    """

    def validate(sql: str) -> ValidationResult:
        try:
            statements = sqlglot.parse(sql, read=dialect)
        except SqlglotError as e:
            return ValidationResult.reject(f"Unable to parse statement: {e}")

        for statement in statements:
            if statement is None:
                continue
            if not isinstance(statement, (exp.Select, exp.Union, exp.Subquery)):
                return ValidationResult.reject("Only read-only statements are allowed")
            if statement.find(*_FORBIDDEN_NODES):
                return ValidationResult.reject("Only read-only statements are allowed")

        return ValidationResult.ok()

    return validate


def create_max_length_validator(max_length: int) -> QueryValidator:
    """Rejects statements longer than ``max_length`` characters."""
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    def validate(sql: str) -> ValidationResult:
        if len(sql) > max_length:
            return ValidationResult.reject(
                f"Statement too long: {len(sql)} characters (limit {max_length})"
            )
        return ValidationResult.ok()

    return validate


def compose_validators(*validators: QueryValidator) -> QueryValidator:
    """Chains validators; the first rejection wins."""

    def validate(sql: str) -> ValidationResult:
        for validator in validators:
            result = validator(sql)
            if not result.is_valid:
                return result
        return ValidationResult.ok()

    return validate
