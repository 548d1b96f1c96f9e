import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

USER_TYPES = ("family", "director", "venue")
BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded", "partial_refunded")
SPLIT_STATUSES = ("pending", "paid", "payout_requested")
CHAT_ROOM_TYPES = ("family_director", "family_venue", "director_venue", "group")
CLIENT_STATUSES = ("active", "inactive", "archived")
COMPLIANCE_STATUSES = ("pending", "in_progress", "compliant", "at_risk", "emergency")
CALENDAR_EVENT_TYPES = ("booking", "appointment", "blocked", "available")
RECURRING_PATTERNS = ("daily", "weekly", "monthly")


def generate_id():
    """Generate a UUID string primary key"""
    return str(uuid.uuid4())


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=True)
    name = Column(String(255), nullable=False)
    user_type = Column(String(20), nullable=False, index=True)  # family, director, venue
    status = Column(String(20), default="active", nullable=False)  # active, inactive, pending
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)

    # Director fields
    company_name = Column(String(255), nullable=True)

    # Venue fields
    venue_name = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=True)
    price_per_hour = Column(Float, nullable=True)

    # Family fields
    emergency_contact = Column(JSON, nullable=True)
    family_code = Column(String(50), nullable=True)
    preferences = Column(JSON, default=dict, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        return self.venue_name or self.company_name or self.name


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, index=True, nullable=False)  # sha256 hex
    created_at = Column(DateTime, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
    last_used_at = Column(DateTime, nullable=True)

    user = relationship("UserProfile", back_populates="sessions")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_id)
    family_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    director_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True, index=True)
    venue_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True, index=True)

    service_type = Column(String(100), nullable=False)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # HH:MM
    duration = Column(Integer, nullable=False)  # minutes
    status = Column(String(20), default="pending", nullable=False)
    price = Column(Float, nullable=True)

    notes = Column(Text, nullable=True)
    director_notes = Column(Text, nullable=True)
    venue_notes = Column(Text, nullable=True)
    special_requirements = Column(JSON, nullable=True)
    attendees_count = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    family = relationship("UserProfile", foreign_keys=[family_id])
    director = relationship("UserProfile", foreign_keys=[director_id])
    venue = relationship("UserProfile", foreign_keys=[venue_id])
    status_history = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingStatusHistory.created_at",
    )

    @property
    def party_ids(self) -> set:
        return {pid for pid in (self.family_id, self.director_id, self.venue_id) if pid}


class BookingStatusHistory(Base):
    __tablename__ = "booking_status_history"

    id = Column(String(36), primary_key=True, default=generate_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    changed_by_type = Column(String(20), nullable=False)
    changed_by_id = Column(String(36), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    booking = relationship("Booking", back_populates="status_history")


class VenueAvailability(Base):
    __tablename__ = "venue_availability"
    __table_args__ = (UniqueConstraint("venue_id", "date", name="uq_venue_availability_day"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    venue_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    # [{start_time, end_time, is_available, price, booking_id}]
    time_slots = Column(JSON, default=list, nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=generate_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False, index=True)
    family_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(10), default="EUR", nullable=False)
    payment_method = Column(String(50), nullable=True)
    status = Column(String(20), default="pending", nullable=False)
    transaction_id = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    booking = relationship("Booking")
    splits = relationship("PaymentSplit", back_populates="payment", cascade="all, delete-orphan")
    refunds = relationship("PaymentRefund", back_populates="payment", cascade="all, delete-orphan")


class PaymentSplit(Base):
    __tablename__ = "payment_splits"

    id = Column(String(36), primary_key=True, default=generate_id)
    payment_id = Column(String(36), ForeignKey("payments.id"), nullable=False, index=True)
    recipient_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True, index=True)
    recipient_type = Column(String(20), nullable=False)  # platform, director, venue
    amount = Column(Float, nullable=False)
    percentage = Column(Float, nullable=True)
    status = Column(String(20), default="pending", nullable=False)
    refunded_amount = Column(Float, default=0.0, nullable=False)
    paid_at = Column(DateTime, nullable=True)
    payout_requested_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    payment = relationship("Payment", back_populates="splits")


class PaymentRefund(Base):
    __tablename__ = "payment_refunds"

    id = Column(String(36), primary_key=True, default=generate_id)
    payment_id = Column(String(36), ForeignKey("payments.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    refund_fee = Column(Float, default=0.0, nullable=False)
    net_refund_amount = Column(Float, nullable=False)
    reason = Column(Text, nullable=True)
    requested_by = Column(String(36), ForeignKey("user_profiles.id"), nullable=False)
    status = Column(String(20), default="completed", nullable=False)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    payment = relationship("Payment", back_populates="refunds")


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=generate_id)
    owner_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    document_type = Column(String(50), default="other", nullable=False)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)  # R2 key
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    is_encrypted = Column(Boolean, default=False, nullable=False)
    shared_with = Column(JSON, default=list, nullable=False)  # user ids
    status = Column(String(20), default="active", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship("UserProfile")
    booking_links = relationship("BookingDocument", back_populates="document", cascade="all, delete-orphan")


class DocumentShare(Base):
    __tablename__ = "document_shares"

    id = Column(String(36), primary_key=True, default=generate_id)
    document_id = Column(String(36), ForeignKey("documents.id"), nullable=False, index=True)
    shared_by = Column(String(36), ForeignKey("user_profiles.id"), nullable=False)
    shared_with = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    permission_level = Column(String(20), default="view", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    revoked_at = Column(DateTime, nullable=True)


class BookingDocument(Base):
    __tablename__ = "booking_documents"

    id = Column(String(36), primary_key=True, default=generate_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False, index=True)
    document_id = Column(String(36), ForeignKey("documents.id"), nullable=False, index=True)
    uploaded_by = Column(String(36), ForeignKey("user_profiles.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    document = relationship("Document", back_populates="booking_links")
    booking = relationship("Booking")


class DocumentAccessLog(Base):
    __tablename__ = "document_access_log"

    id = Column(String(36), primary_key=True, default=generate_id)
    document_id = Column(String(36), ForeignKey("documents.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False)
    access_type = Column(String(20), nullable=False)  # download, view, metadata
    created_at = Column(DateTime, server_default=func.now())


class ChatRoom(Base):
    __tablename__ = "chat_rooms"

    id = Column(String(36), primary_key=True, default=generate_id)
    room_type = Column(String(30), nullable=False)
    title = Column(String(255), nullable=True)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    created_by = Column(String(36), ForeignKey("user_profiles.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    participants = relationship("ChatParticipant", back_populates="room", cascade="all, delete-orphan")
    messages = relationship(
        "ChatMessage",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="ChatMessage.created_at",
    )


class ChatParticipant(Base):
    __tablename__ = "chat_participants"
    __table_args__ = (UniqueConstraint("room_id", "user_id", name="uq_chat_participant"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    room_id = Column(String(36), ForeignKey("chat_rooms.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    user_type = Column(String(20), nullable=False)
    joined_at = Column(DateTime, server_default=func.now())

    room = relationship("ChatRoom", back_populates="participants")
    user = relationship("UserProfile")


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(String(36), primary_key=True, default=generate_id)
    room_id = Column(String(36), ForeignKey("chat_rooms.id"), nullable=False, index=True)
    sender_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False)
    content = Column(Text, nullable=False)
    message_type = Column(String(20), default="text", nullable=False)  # text, file, system
    message_metadata = Column("metadata", JSON, nullable=True)
    read_by = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    room = relationship("ChatRoom", back_populates="messages")
    sender = relationship("UserProfile")


class DirectorClient(Base):
    __tablename__ = "director_clients"
    __table_args__ = (UniqueConstraint("director_id", "family_id", name="uq_director_client"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    director_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    family_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    status = Column(String(20), default="active", nullable=False)
    notes = Column(Text, nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    family = relationship("UserProfile", foreign_keys=[family_id])


class ComplianceTracking(Base):
    __tablename__ = "dutch_compliance_tracking"

    id = Column(String(36), primary_key=True, default=generate_id)
    funeral_request_id = Column(String(100), unique=True, index=True, nullable=False)
    director_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True, index=True)
    family_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True, index=True)
    family_name = Column(String(255), nullable=True)

    death_registration_date = Column(DateTime, nullable=False)
    legal_deadline = Column(DateTime, nullable=False)
    working_days_remaining = Column(Integer, nullable=True)

    municipality_code = Column(String(20), nullable=True)
    municipality_name = Column(String(255), nullable=True)
    planned_funeral_date = Column(Date, nullable=True)
    permit_required = Column(Boolean, default=False, nullable=False)
    bsn_verified = Column(Boolean, default=False, nullable=False)

    emergency_protocol_active = Column(Boolean, default=False, nullable=False)
    emergency_triggered_at = Column(DateTime, nullable=True)
    compliance_status = Column(String(20), default="pending", nullable=False)
    last_checked_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class TimelineEvent(Base):
    __tablename__ = "timeline_events"

    id = Column(String(36), primary_key=True, default=generate_id)
    funeral_request_id = Column(String(100), nullable=False, index=True)
    # registration, deadline_warning, document_generated, emergency_triggered, compliance_check
    event_type = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class ComplianceAlert(Base):
    __tablename__ = "compliance_alerts"

    id = Column(String(36), primary_key=True, default=generate_id)
    funeral_request_id = Column(String(100), nullable=False, index=True)
    alert_type = Column(String(20), nullable=False)  # info, warning, critical, emergency
    hours_remaining = Column(Integer, nullable=True)
    message = Column(Text, nullable=False)
    action_required = Column(JSON, default=list)
    stakeholders = Column(JSON, default=list)
    is_acknowledged = Column(Boolean, default=False, nullable=False)
    acknowledged_by = Column(String(36), ForeignKey("user_profiles.id"), nullable=True)
    acknowledged_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class ComplianceMonitorState(Base):
    """Single-row switchboard for the background compliance monitor"""

    __tablename__ = "compliance_monitor_state"

    id = Column(Integer, primary_key=True)
    is_enabled = Column(Boolean, default=True, nullable=False)
    check_interval_minutes = Column(Integer, default=60, nullable=False)
    last_check_at = Column(DateTime, nullable=True)
    checks_performed = Column(Integer, default=0, nullable=False)
    last_alerts_generated = Column(Integer, default=0, nullable=False)


class IntakeChatHistory(Base):
    __tablename__ = "intake_chat_history"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    intake_id = Column(String(100), nullable=False, index=True)
    message_type = Column(String(20), nullable=False)  # user, assistant
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class IntakeReport(Base):
    __tablename__ = "intake_reports"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    intake_id = Column(String(100), nullable=True, index=True)
    report = Column(JSON, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    id = Column(String(36), primary_key=True, default=generate_id)
    owner_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    owner_type = Column(String(20), default="director", nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    type = Column(String(20), nullable=False)  # booking, appointment, blocked, available
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True, index=True)
    recurring_pattern = Column(String(20), nullable=True)  # daily, weekly, monthly
    recurring_end_date = Column(Date, nullable=True)
    recurring_parent_id = Column(String(36), ForeignKey("calendar_events.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship("Booking")


class DirectorInvitation(Base):
    """Invitation code a director hands to a family so they can connect on signup"""

    __tablename__ = "director_invitations"

    id = Column(String(36), primary_key=True, default=generate_id)
    director_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    code = Column(String(20), unique=True, index=True, nullable=False)  # UFV-YYYY-NNNNNN
    family_name = Column(String(255), nullable=False)
    primary_contact = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    municipality = Column(String(255), nullable=True)
    expected_date = Column(Date, nullable=True)
    personal_note = Column(Text, nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, connected
    family_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True)
    connected_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    director = relationship("UserProfile", foreign_keys=[director_id])

    def is_expired(self, now=None) -> bool:
        return self.status == "pending" and (now or datetime.utcnow()) > self.expires_at
