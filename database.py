"""
MongoDB access

The connection is configured from ``DATABASE_URL`` and ``DATABASE_NAME``;
when either is missing ``db`` stays None and request handlers answer 500.
"""
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from dotenv import load_dotenv
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "prospera")

EXPENSES = "expense"
INCOME = "income"
SAVINGS_GOALS = "savings_goal"
USERS = "user"

_client: Optional[MongoClient] = None
db: Optional[Database] = None

if DATABASE_URL:
    try:
        _client = MongoClient(DATABASE_URL, tz_aware=True)
        db = _client[DATABASE_NAME]
    except Exception as e:
        logger.error("MongoDB connection error: %s", e)
        db = None


def ensure_indexes(database: Database) -> None:
    for name in (EXPENSES, INCOME, SAVINGS_GOALS):
        database[name].create_index([("user_token", ASCENDING), ("created_at", DESCENDING)])
    database[USERS].create_index("user_token", unique=True)


def to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _utc(value: datetime) -> datetime:
    # pymongo hands back naive UTC datetimes unless tz_aware is set
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            value = str(value)
        elif isinstance(value, datetime):
            value = _utc(value)
        out[key] = value
    if "_id" in out:
        out["id"] = out["_id"]
    return out


def create_document(database: Database, collection_name: str, data: Any) -> Dict[str, Any]:
    if hasattr(data, "model_dump"):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    now = datetime.now(timezone.utc)
    data_dict["created_at"] = now
    data_dict["updated_at"] = now
    result = database[collection_name].insert_one(data_dict)
    data_dict["_id"] = result.inserted_id
    return serialize_doc(data_dict)


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None) -> List[Dict[str, Any]]:
    cursor = database[collection_name].find(filter_dict or {}).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
    return [serialize_doc(doc) for doc in cursor]
