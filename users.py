import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from database import (
    Storage,
    create_document,
    delete_document,
    get_document,
    get_documents,
    get_storage,
    serialize_document,
    update_document,
)
from errors import BadRequestError, NotFoundError, StorageError
from schemas import REQUIRED_USER_FIELDS, ErrorResponse, missing_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/usuarios", tags=["usuarios"])

BAD_REQUEST = {400: {"model": ErrorResponse}}
NOT_FOUND = {404: {"model": ErrorResponse}}
SERVER_ERROR = {500: {"model": ErrorResponse}}


@router.post("", status_code=201, responses={**BAD_REQUEST, **SERVER_ERROR})
async def create_user(user: Dict[str, Any], storage: Storage = Depends(get_storage)):
    """Create a user. nombre, apellido, telefono and edad must be present."""
    if missing_fields(user, REQUIRED_USER_FIELDS):
        raise BadRequestError(
            "Faltan datos esenciales del usuario (nombre, apellido, telefono, edad)."
        )

    try:
        user_id = await create_document(storage.users, user)
    except Exception as e:
        logger.exception("Failed to insert user")
        raise StorageError("Error al crear el usuario.", str(e))

    return serialize_document({"_id": user_id, **user})


@router.get("", responses=SERVER_ERROR)
async def list_users(storage: Storage = Depends(get_storage)):
    try:
        users = await get_documents(storage.users)
    except Exception as e:
        logger.exception("Failed to list users")
        raise StorageError("Error al obtener los usuarios.", str(e))
    return serialize_document(users)


@router.get("/{user_id}", responses={**BAD_REQUEST, **NOT_FOUND})
async def get_user(user_id: str, storage: Storage = Depends(get_storage)):
    try:
        user = await get_document(storage.users, user_id)
    except Exception as e:
        logger.warning("Lookup of user '%s' failed: %s", user_id, e)
        raise BadRequestError("ID de usuario inválido.", str(e))

    if user is None:
        raise NotFoundError("Usuario no encontrado.")
    return serialize_document(user)


@router.put("/{user_id}", responses={**BAD_REQUEST, **NOT_FOUND})
async def update_user(
    user_id: str,
    changes: Dict[str, Any],
    storage: Storage = Depends(get_storage),
):
    """Merge the given fields into the user and return the stored result.

    The write and the re-read are separate round-trips, so a concurrent
    writer may show up in the returned document.
    """
    try:
        matched = await update_document(storage.users, user_id, changes)
        updated = await get_document(storage.users, user_id) if matched else None
    except Exception as e:
        logger.warning("Update of user '%s' failed: %s", user_id, e)
        raise BadRequestError("Error al actualizar el usuario.", str(e))

    if not matched:
        raise NotFoundError("Usuario no encontrado para actualizar.")
    return serialize_document(updated)


@router.delete(
    "/{user_id}",
    status_code=204,
    response_class=Response,
    responses={**BAD_REQUEST, **NOT_FOUND},
)
async def delete_user(user_id: str, storage: Storage = Depends(get_storage)):
    try:
        deleted = await delete_document(storage.users, user_id)
    except Exception as e:
        logger.warning("Delete of user '%s' failed: %s", user_id, e)
        raise BadRequestError("Error al eliminar el usuario.", str(e))

    if not deleted:
        raise NotFoundError("Usuario no encontrado para eliminar.")
    return Response(status_code=204)
