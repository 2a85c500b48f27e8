import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from database import (
    Storage,
    add_to_set,
    create_document,
    delete_document,
    get_document,
    get_documents,
    get_storage,
    serialize_document,
)
from errors import BadRequestError, NotFoundError, StorageError
from schemas import REQUIRED_GROUP_FIELDS, ErrorResponse, MessageResponse, is_present, missing_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grupos", tags=["grupos"])

BAD_REQUEST = {400: {"model": ErrorResponse}}
NOT_FOUND = {404: {"model": ErrorResponse}}
SERVER_ERROR = {500: {"model": ErrorResponse}}

MEMBERS_FIELD = "integrantes"


@router.post("", status_code=201, responses={**BAD_REQUEST, **SERVER_ERROR})
async def create_group(group: Dict[str, Any], storage: Storage = Depends(get_storage)):
    """Create a group. integrantes falls back to [] unless it is a list."""
    if missing_fields(group, REQUIRED_GROUP_FIELDS):
        raise BadRequestError("Falta el nombre del grupo.")

    group = dict(group)
    if not isinstance(group.get(MEMBERS_FIELD), list):
        group[MEMBERS_FIELD] = []

    try:
        group_id = await create_document(storage.groups, group)
    except Exception as e:
        logger.exception("Failed to insert group")
        raise StorageError("Error al crear el grupo.", str(e))

    return serialize_document({"_id": group_id, **group})


@router.get("", responses=SERVER_ERROR)
async def list_groups(storage: Storage = Depends(get_storage)):
    try:
        groups = await get_documents(storage.groups)
    except Exception as e:
        logger.exception("Failed to list groups")
        raise StorageError("Error al obtener los grupos.", str(e))
    return serialize_document(groups)


@router.get("/{group_id}", responses={**BAD_REQUEST, **NOT_FOUND})
async def get_group(group_id: str, storage: Storage = Depends(get_storage)):
    try:
        group = await get_document(storage.groups, group_id)
    except Exception as e:
        logger.warning("Lookup of group '%s' failed: %s", group_id, e)
        raise BadRequestError("ID de grupo inválido.", str(e))

    if group is None:
        raise NotFoundError("Grupo no encontrado.")
    return serialize_document(group)


@router.delete(
    "/{group_id}",
    status_code=204,
    response_class=Response,
    responses={**BAD_REQUEST, **NOT_FOUND},
)
async def delete_group(group_id: str, storage: Storage = Depends(get_storage)):
    try:
        deleted = await delete_document(storage.groups, group_id)
    except Exception as e:
        logger.warning("Delete of group '%s' failed: %s", group_id, e)
        raise BadRequestError("Error al eliminar el grupo.", str(e))

    if not deleted:
        raise NotFoundError("Grupo no encontrado para eliminar.")
    return Response(status_code=204)


@router.post(
    "/{group_id}/agregar-usuario",
    response_model=MessageResponse,
    responses={**BAD_REQUEST, **NOT_FOUND},
)
async def add_member(
    group_id: str,
    payload: Dict[str, Any],
    storage: Storage = Depends(get_storage),
):
    """Add idUsuario to the group's integrantes if it is not there yet.

    idUsuario is stored as given; it is not checked against the users collection.
    """
    member_id = payload.get("idUsuario")
    if not is_present(member_id):
        raise BadRequestError("Se necesita el 'idUsuario' en el cuerpo de la petición.")

    try:
        matched = await add_to_set(storage.groups, group_id, MEMBERS_FIELD, member_id)
    except Exception as e:
        logger.warning("Adding member to group '%s' failed: %s", group_id, e)
        raise BadRequestError("Error al agregar usuario al grupo.", str(e))

    if not matched:
        raise NotFoundError("Grupo no encontrado.")
    logger.info("Added member '%s' to group '%s'", member_id, group_id)
    return {"mensaje": "Usuario agregado al grupo con éxito."}
