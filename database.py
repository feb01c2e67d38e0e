"""
Database helpers

MongoDB access for the three collections. Every document leaves this module
through ``serialize``, which replaces ``_id`` with a string ``id``; identifiers
coming back from the API go through ``parse_object_id``. No other module
touches ObjectId.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson.errors import InvalidId
from bson.objectid import ObjectId
from fastapi import Request
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database

from config import Settings
from errors import InternalError

logger = logging.getLogger(__name__)

ADMIN = 'admin'
BOOKING = 'booking'
AVAILABLE_DATE = 'availabledate'


def get_database(settings: Settings) -> Database:
    client = MongoClient(settings.database_url, tz_aware=True)
    return client[settings.database_name]


def get_db(request: Request) -> Database:
    db = request.app.state.db
    if db is None:
        raise InternalError("Database not configured")
    return db


def ensure_indexes(db: Database) -> None:
    db[ADMIN].create_index('email', unique=True)
    db[AVAILABLE_DATE].create_index('date', unique=True)
    db[BOOKING].create_index([('created_at', DESCENDING)])


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    data = dict(doc)
    data['id'] = str(data.pop('_id'))
    return data


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    """Insert a document stamped with created_at/updated_at and return it serialized."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    now = _now()
    data_dict['created_at'] = now
    data_dict['updated_at'] = now
    result = db[collection_name].insert_one(data_dict)
    data_dict['_id'] = result.inserted_id
    return serialize(data_dict)


# --- Credential store ---

def find_admin_by_email(db: Database, email: str) -> Optional[Dict[str, Any]]:
    return serialize(db[ADMIN].find_one({'email': email}))


# --- Booking store ---

def list_bookings(db: Database) -> List[Dict[str, Any]]:
    cursor = db[BOOKING].find().sort([('created_at', DESCENDING), ('_id', DESCENDING)])
    return [serialize(doc) for doc in cursor]


def set_booking_status(db: Database, booking_id: str, status: str) -> Optional[Dict[str, Any]]:
    oid = parse_object_id(booking_id)
    if oid is None:
        return None
    # The write only lands if the status is still the one just read, so
    # previous_status always names the value it replaced. Last write still wins.
    while True:
        current = db[BOOKING].find_one({'_id': oid}, {'status': 1})
        if current is None:
            return None
        updated = db[BOOKING].find_one_and_update(
            {'_id': oid, 'status': current.get('status')},
            {'$set': {
                'status': status,
                'previous_status': current.get('status'),
                'updated_at': _now(),
            }},
            return_document=ReturnDocument.AFTER,
        )
        if updated is not None:
            return serialize(updated)


def count_bookings(db: Database, status: str) -> int:
    return db[BOOKING].count_documents({'status': status})


# --- Availability store ---

def list_available_dates(db: Database) -> List[Dict[str, Any]]:
    cursor = db[AVAILABLE_DATE].find({'is_available': True}).sort('date', ASCENDING)
    return [serialize(doc) for doc in cursor]


def find_available_date(db: Database, date: str) -> Optional[Dict[str, Any]]:
    return serialize(db[AVAILABLE_DATE].find_one({'date': date}))


def delete_available_date(db: Database, date_id: str) -> bool:
    oid = parse_object_id(date_id)
    if oid is None:
        return False
    result = db[AVAILABLE_DATE].delete_one({'_id': oid})
    return result.deleted_count == 1
