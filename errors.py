"""
Application exceptions

ApiError subclasses are raised by the route handlers and rendered by the
exception handlers registered in main.py as {"mensaje": ..., "detalle": ...}.
"""

from typing import Optional


class ApiError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = 500

    def __init__(self, mensaje: str, detalle: Optional[str] = None):
        self.mensaje = mensaje
        self.detalle = detalle
        super().__init__(mensaje)

    def to_body(self) -> dict:
        body = {"mensaje": self.mensaje}
        if self.detalle is not None:
            body["detalle"] = self.detalle
        return body


class BadRequestError(ApiError):
    """Missing required fields, malformed ids, or a failed by-id storage call."""

    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class StorageError(ApiError):
    """Storage failure while creating or listing documents."""

    status_code = 500


class StorageConnectionError(Exception):
    """The database could not be reached at startup. Fatal."""


class ConfigurationError(Exception):
    pass
