"""
MongoDB access for the Plantastic Care API.

Each Pydantic model in ``schemas.py`` maps to a collection named after the
lowercase class name (User -> "user", Post -> "post", ...). Route handlers get
the database through the ``get_db`` dependency so tests can swap it out.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from config import settings
from errors import NotFound

client: MongoClient = MongoClient(settings.mongo_url, tz_aware=True, serverSelectionTimeoutMS=5000)
db: Database = client[settings.database_name]


def get_db() -> Database:
    return db


def utcnow() -> datetime:
    # Mongo stores milliseconds; truncate so stored and returned values agree
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def object_id(id_str: str, what: str = "Resource") -> ObjectId:
    """Parse a path id; ids that cannot be parsed can never resolve."""
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise NotFound(f"{what} not found")


def create_document(database: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    doc.setdefault("created_at", utcnow())
    result = database[collection_name].insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def ensure_indexes(database: Database) -> None:
    database["user"].create_index([("email", ASCENDING)], unique=True)
    database["newsletter"].create_index([("email", ASCENDING)], unique=True)
    database["post"].create_index([("created_at", DESCENDING), ("_id", DESCENDING)])
