from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Envelope for every non-2xx response; ``code`` is ``validation_error`` for rejected payloads."""

    detail: Any
    code: str | None = None
