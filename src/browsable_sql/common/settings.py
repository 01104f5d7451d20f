from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from browsable_sql.options import BasicAuthCredentials, BrowsableOptions
from browsable_sql.security.validators import (
    QueryValidator,
    compose_validators,
    create_ast_read_only_validator,
    create_max_length_validator,
    create_read_only_validator,
)

# Load environment variables from .env into os.environ
load_dotenv()


class GatewaySettings(BaseSettings):
    """Gateway configuration settings backed by environment variables."""

    database_url: str = Field(
        default="sqlite:///./browsable.db",
        validation_alias="DATABASE_URL",
        description="SQLAlchemy URL of the storage the gateway exposes."
    )
    basic_auth_username: Optional[str] = Field(default=None, validation_alias="BROWSABLE_USERNAME")
    basic_auth_password: Optional[str] = Field(default=None, validation_alias="BROWSABLE_PASSWORD")
    dangerously_disable_auth: bool = Field(
        default=False,
        validation_alias="DANGEROUSLY_DISABLE_AUTH",
        description="Serve every route without authentication. Never enable on a reachable host."
    )
    disable_studio: bool = Field(default=False, validation_alias="DISABLE_STUDIO")

    validator: Literal["none", "read_only", "ast_read_only"] = Field(
        default="none",
        validation_alias="VALIDATOR",
        description="Statement validator: 'none', 'read_only' (keyword check) or 'ast_read_only' (sqlglot)."
    )
    sql_dialect: Optional[str] = Field(
        default=None,
        validation_alias="SQL_DIALECT",
        description="sqlglot dialect used by the 'ast_read_only' validator."
    )
    max_statement_length: Optional[int] = Field(
        default=None,
        validation_alias="MAX_STATEMENT_LENGTH",
        gt=0,
        description="Reject statements longer than this many characters."
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def basic_auth(self) -> Optional[BasicAuthCredentials]:
        if self.basic_auth_username is None or self.basic_auth_password is None:
            return None
        return BasicAuthCredentials(username=self.basic_auth_username, password=self.basic_auth_password)

    def build_validator(self) -> Optional[QueryValidator]:
        validators = []
        if self.max_statement_length is not None:
            validators.append(create_max_length_validator(self.max_statement_length))
        if self.validator == "read_only":
            validators.append(create_read_only_validator())
        elif self.validator == "ast_read_only":
            validators.append(create_ast_read_only_validator(self.sql_dialect))

        if not validators:
            return None
        if len(validators) == 1:
            return validators[0]
        return compose_validators(*validators)

    def gateway_options(self) -> BrowsableOptions:
        return BrowsableOptions(
            basic_auth=self.basic_auth(),
            dangerously_disable_auth=self.dangerously_disable_auth,
            disable_studio=self.disable_studio,
            validator=self.build_validator(),
        )
