"""
Database Schemas

MongoDB collection schemas, defined as Pydantic models.
These schemas are used for data validation before a document is inserted.

Each Pydantic model represents a collection in the database.
Model name is converted to lowercase for the collection name:
- Admin -> "admin" collection
- Booking -> "booking" collection
- AvailableDate -> "availabledate" collection

The API speaks camelCase; the ``*Out`` models at the bottom map stored
documents (already normalized by ``database.serialize``) to that shape.
"""

from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

BookingStatus = Literal['pending', 'accepted', 'declined']

BOOKING_STATUSES = ('pending', 'accepted', 'declined')
# Statuses an administrator may set.
DECISION_STATUSES = ('accepted', 'declined')


class Admin(BaseModel):
    """
    Administrator collection schema
    Collection name: "admin"
    """
    email: str
    password: str  # bcrypt hash


class Booking(BaseModel):
    """
    Bookings collection schema
    Collection name: "booking"
    """
    full_name: str
    email: str
    phone: str
    date: str  # opaque date token chosen by the client
    payment_proof: str  # stored upload filename
    status: BookingStatus = 'pending'
    previous_status: Optional[BookingStatus] = None


class AvailableDate(BaseModel):
    """
    Available dates collection schema
    Collection name: "availabledate"
    """
    date: str  # ISO date (YYYY-MM-DD)
    is_available: bool = True


# --- API models ---

class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    message: str = 'Login successful'


class StatusUpdateRequest(BaseModel):
    status: Optional[str] = None


class AvailableDateCreateRequest(BaseModel):
    date: Optional[str] = None


class BookingOut(BaseModel):
    id: str
    fullName: str
    email: str
    phone: str
    date: str
    paymentProof: str
    status: BookingStatus
    previousStatus: Optional[BookingStatus] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "BookingOut":
        return cls(
            id=doc['id'],
            fullName=doc['full_name'],
            email=doc['email'],
            phone=doc['phone'],
            date=doc['date'],
            paymentProof=doc['payment_proof'],
            status=doc['status'],
            previousStatus=doc.get('previous_status'),
            createdAt=doc.get('created_at'),
            updatedAt=doc.get('updated_at'),
        )


class BookingEnvelope(BaseModel):
    message: str
    booking: BookingOut


class AvailableDateOut(BaseModel):
    id: str
    date: str
    isAvailable: bool
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "AvailableDateOut":
        return cls(
            id=doc['id'],
            date=doc['date'],
            isAvailable=doc.get('is_available', True),
            createdAt=doc.get('created_at'),
            updatedAt=doc.get('updated_at'),
        )


class AvailableDateEnvelope(BaseModel):
    message: str
    date: AvailableDateOut


class MessageResponse(BaseModel):
    message: str


class DashboardStats(BaseModel):
    totalBookings: int
    pendingBookings: int
    acceptedBookings: int
    declinedBookings: int
