"""HTTP mapping for storefront business errors.

Protean's own exceptions (ValidationError, ObjectNotFoundError, ...) are
mapped by ``protean.integrations.fastapi.register_exception_handlers``;
this adds the storefront's typed errors with the same ``{"error": ...}``
body.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import StorefrontError


async def _storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.messages})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(StorefrontError, _storefront_error_handler)
