"""Request correlation IDs.

Every response carries ``X-Request-ID``; the same id is injected into
structlog events (see core/logging.py) and into error payload logs.
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI


def setup_correlation_middleware(app: FastAPI) -> None:
    """Attach CorrelationIdMiddleware.

    A client-supplied X-Request-ID is echoed back unchanged; otherwise a new
    UUID4 is generated.
    """
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        generator=lambda: str(uuid.uuid4()),
        validator=None,
        transformer=lambda value: value,
    )


def get_correlation_id() -> str | None:
    """Correlation ID of the current request, or None outside a request."""
    return correlation_id.get(None)


__all__ = ["setup_correlation_middleware", "get_correlation_id"]
