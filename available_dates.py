import logging
import re
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from auth import require_admin
from database import (
    AVAILABLE_DATE,
    create_document,
    delete_available_date,
    find_available_date,
    get_db,
    list_available_dates,
)
from errors import Conflict, NotFound, ValidationError
from schemas import (
    AvailableDate,
    AvailableDateCreateRequest,
    AvailableDateEnvelope,
    AvailableDateOut,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["available-dates"])

# strptime alone would also take "2025-6-1"; require the zero-padded form so
# every calendar date has exactly one spelling.
_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def parse_calendar_date(value: str) -> str:
    value = (value or '').strip()
    if not value:
        raise ValidationError("Date is required")
    if not _ISO_DATE.match(value):
        raise ValidationError("Date must use the YYYY-MM-DD format")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Not a calendar date: {value}") from e
    return value


@router.get("", response_model=List[AvailableDateOut])
async def get_available_dates(db: Database = Depends(get_db)):
    return [AvailableDateOut.from_document(doc) for doc in list_available_dates(db)]


@router.post("", response_model=AvailableDateEnvelope, status_code=201)
async def add_available_date(
    payload: AvailableDateCreateRequest,
    db: Database = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    date = parse_calendar_date(payload.date)
    if find_available_date(db, date) is not None:
        raise Conflict("Date already exists")
    try:
        record = create_document(db, AVAILABLE_DATE, AvailableDate(date=date))
    except DuplicateKeyError as e:
        raise Conflict("Date already exists") from e
    logger.info("Available date %s added (%s)", date, record['id'])
    return AvailableDateEnvelope(message="Available date added", date=AvailableDateOut.from_document(record))


@router.delete("/{date_id}", response_model=MessageResponse)
async def remove_available_date(
    date_id: str,
    db: Database = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    if not delete_available_date(db, date_id):
        raise NotFound("Date not found")
    logger.info("Available date %s removed", date_id)
    return MessageResponse(message="Available date removed")
