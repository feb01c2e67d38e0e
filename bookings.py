import logging
from typing import List, Optional, Union

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, File, Form, UploadFile
from pymongo.database import Database
from pymongo.errors import PyMongoError

from auth import require_admin
from config import Settings, get_settings
from database import BOOKING, count_bookings, create_document, get_db, list_bookings, set_booking_status
from errors import InternalError, NotFound, ValidationError
from schemas import (
    DECISION_STATUSES,
    Booking,
    BookingEnvelope,
    BookingOut,
    DashboardStats,
    StatusUpdateRequest,
)
from uploads import remove_payment_proof, store_payment_proof, validate_payment_proof

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["bookings"])


def _required(value: Optional[str], label: str) -> str:
    value = (value or '').strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


@router.post("/bookings", response_model=BookingEnvelope, status_code=201)
async def create_booking(
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    # A part sent with an empty filename arrives as a plain string.
    payment_proof: Union[UploadFile, str, None] = File(None, alias="paymentProof"),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if payment_proof is None or isinstance(payment_proof, str) or not payment_proof.filename:
        raise ValidationError("Payment proof is required")

    doc = {
        'full_name': _required(full_name, "Full name"),
        'email': _required(email, "Email"),
        'phone': _required(phone, "Phone"),
        'date': _required(date, "Date"),
    }
    try:
        doc['email'] = validate_email(doc['email'], check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}") from e

    data = await payment_proof.read(settings.max_upload_bytes + 1)
    validate_payment_proof(payment_proof.filename, payment_proof.content_type, len(data), settings.max_upload_bytes)

    try:
        stored = store_payment_proof(data, payment_proof.filename, settings.upload_dir)
    except OSError as e:
        logger.exception("Failed to write payment proof %r", payment_proof.filename)
        raise InternalError() from e

    try:
        booking = create_document(db, BOOKING, Booking(payment_proof=stored, **doc))
    except PyMongoError as e:
        logger.exception("Failed to save booking for %s", doc['email'])
        remove_payment_proof(stored, settings.upload_dir)
        raise InternalError() from e

    logger.info("Booking %s created for %s on %s", booking['id'], booking['email'], booking['date'])
    return BookingEnvelope(message="Booking created successfully", booking=BookingOut.from_document(booking))


@router.get("/bookings", response_model=List[BookingOut])
async def get_bookings(db: Database = Depends(get_db), _admin: dict = Depends(require_admin)):
    return [BookingOut.from_document(doc) for doc in list_bookings(db)]


@router.api_route("/bookings/{booking_id}/status", methods=["PATCH", "PUT"], response_model=BookingEnvelope)
async def update_booking_status(
    booking_id: str,
    payload: StatusUpdateRequest,
    db: Database = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    if payload.status not in DECISION_STATUSES:
        raise ValidationError("Invalid status")
    booking = set_booking_status(db, booking_id, payload.status)
    if booking is None:
        raise NotFound("Booking not found")
    logger.info(
        "Booking %s status %s -> %s", booking_id, booking.get('previous_status'), booking['status']
    )
    return BookingEnvelope(message="Booking status updated", booking=BookingOut.from_document(booking))


@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats(db: Database = Depends(get_db), _admin: dict = Depends(require_admin)):
    pending = count_bookings(db, 'pending')
    accepted = count_bookings(db, 'accepted')
    declined = count_bookings(db, 'declined')
    return DashboardStats(
        totalBookings=pending + accepted + declined,
        pendingBookings=pending,
        acceptedBookings=accepted,
        declinedBookings=declined,
    )
