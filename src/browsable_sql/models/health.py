from typing import Literal, Optional

from pydantic import BaseModel


class HealthStatus(BaseModel):
    """Body of ``/health`` and ``/ready``; ``detail`` is only set when storage is unreachable."""

    status: Literal["ok", "ready", "unavailable"]
    detail: Optional[str] = None
