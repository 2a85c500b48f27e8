# Example usage:
# from database import connect, create_document, get_document
#
# storage = await connect("mongodb://localhost:27017", "gestionGruposUsuarios")
#
# # Insert a user and read it back
# user_id = await create_document(storage.users, {"nombre": "Ana", "edad": 30})
# user = await get_document(storage.users, str(user_id))
#
# # Merge fields into an existing user
# await update_document(storage.users, str(user_id), {"edad": 31})
#
# # Add a member to a group only if it is not already there
# await add_to_set(storage.groups, group_id, "integrantes", str(user_id))

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from pymongo import AsyncMongoClient

from errors import StorageConnectionError

logger = logging.getLogger(__name__)


@dataclass
class Storage:
    """Handles to the two collections, created once at startup.

    The client is kept so the connection pool can be closed on shutdown.
    """

    users: Any
    groups: Any
    client: Optional[AsyncMongoClient] = None

    async def ping(self) -> None:
        if self.client is None:
            raise StorageConnectionError("Database client not initialized")
        await self.client.admin.command("ping")

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


async def connect(
    uri: str,
    database_name: str,
    users_collection: str = "usuarios",
    groups_collection: str = "grupos",
    timeout_ms: int = 5000,
) -> Storage:
    """Open the MongoDB connection and return the collection handles.

    Raises StorageConnectionError if the server cannot be reached; there is
    no retry.
    """
    client = AsyncMongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
    try:
        # The client connects lazily, ping forces the round-trip now
        await client.admin.command("ping")
    except Exception as e:
        await client.close()
        raise StorageConnectionError(f"Could not connect to MongoDB: {e}") from e

    db = client[database_name]
    logger.info("Connected to MongoDB database '%s'", database_name)
    return Storage(
        users=db[users_collection],
        groups=db[groups_collection],
        client=client,
    )


def get_storage(request: Request) -> Storage:
    """FastAPI dependency returning the Storage set up by the app lifespan."""
    return request.app.state.storage


# Helper functions for common database operations
def parse_object_id(doc_id: str) -> ObjectId:
    """Convert a path id into an ObjectId.

    Raises bson.errors.InvalidId unless doc_id is a 24 character hex string.
    """
    return ObjectId(doc_id)


def serialize_document(document: Any) -> Any:
    """Make a document (or list of documents) JSON-ready, ObjectIds as hex strings."""
    return jsonable_encoder(document, custom_encoder={ObjectId: str})


async def create_document(collection, data: Dict[str, Any]) -> Any:
    """Insert a single document

    Args:
        collection: The MongoDB collection
        data: Fields to store, kept verbatim

    Returns:
        The inserted document's _id
    """
    data_dict = data.copy()
    result = await collection.insert_one(data_dict)
    return result.inserted_id


async def get_documents(collection) -> List[Dict[str, Any]]:
    """Get every document in the collection"""
    return await collection.find({}).to_list()


async def get_document(collection, doc_id: str) -> Optional[Dict[str, Any]]:
    """Get one document by id, None when no document matches"""
    return await collection.find_one({"_id": parse_object_id(doc_id)})


async def update_document(collection, doc_id: str, update_data: Dict[str, Any]) -> bool:
    """Merge fields into a document

    Only the keys present in update_data are overwritten.

    Returns:
        bool: True if a document matched doc_id, False otherwise
    """
    result = await collection.update_one(
        {"_id": parse_object_id(doc_id)},
        {"$set": update_data},
    )
    return result.matched_count > 0


async def delete_document(collection, doc_id: str) -> bool:
    """Delete a document, True if one was removed"""
    result = await collection.delete_one({"_id": parse_object_id(doc_id)})
    return result.deleted_count > 0


async def add_to_set(collection, doc_id: str, field: str, value: Any) -> bool:
    """Append value to an array field unless already present

    Returns:
        bool: True if a document matched doc_id, False otherwise
    """
    result = await collection.update_one(
        {"_id": parse_object_id(doc_id)},
        {"$addToSet": {field: value}},
    )
    return result.matched_count > 0
