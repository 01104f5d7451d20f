from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class StudioQueryCommand(BaseModel):
    type: Literal["query"]
    id: Optional[Union[str, int]] = None
    statement: str

    model_config = ConfigDict(extra="ignore")


class StudioTransactionCommand(BaseModel):
    type: Literal["transaction"]
    id: Optional[Union[str, int]] = None
    statements: List[str]

    model_config = ConfigDict(extra="ignore")


StudioCommand = Annotated[
    Union[StudioQueryCommand, StudioTransactionCommand],
    Field(discriminator="type"),
]

studio_command_adapter: TypeAdapter[StudioCommand] = TypeAdapter(StudioCommand)


class StudioColumn(BaseModel):
    """Column descriptor understood by the browsing UI."""

    name: str
    displayName: str
    originalType: str = "text"
    type: Optional[str] = None


class StudioStat(BaseModel):
    queryDurationMs: float = 0
    rowsAffected: int = 0
    rowsRead: int = 0
    rowsWritten: int = 0


class StudioResult(BaseModel):
    headers: List[StudioColumn]
    rows: List[Dict[str, Any]]
    stat: StudioStat
