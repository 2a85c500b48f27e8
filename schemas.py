"""
Database Schemas

Documents in both collections are schema-less; request bodies are accepted as
plain dictionaries so extra client fields are stored verbatim. The models
below describe the JSON shapes the API returns, for the OpenAPI docs.

usuarios: nombre, apellido, telefono, edad (required) + any other field
grupos:   nombreGrupo (required), integrantes (list of user id strings)
"""

from typing import Any, Optional

from pydantic import BaseModel

REQUIRED_USER_FIELDS = ("nombre", "apellido", "telefono", "edad")
REQUIRED_GROUP_FIELDS = ("nombreGrupo",)


def is_present(value: Any) -> bool:
    """Truthiness as JSON clients expect it: empty lists and objects count as values."""
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def missing_fields(data: dict, required) -> list:
    return [name for name in required if not is_present(data.get(name))]


class ErrorResponse(BaseModel):
    mensaje: str
    detalle: Optional[str] = None


class MessageResponse(BaseModel):
    mensaje: str


class StatusResponse(BaseModel):
    servidor: str
    baseDeDatos: str
    detalle: Optional[str] = None
