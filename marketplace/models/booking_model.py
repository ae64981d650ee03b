from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, text
import uuid
from marketplace.database import Base
from sqlalchemy.orm import relationship

ACTIVE_STATUS_CLAUSE = text("status IN ('pending', 'accepted')")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    customer_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    # Copied from the service when the booking is created
    provider_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    status = Column(String, nullable=False, default="pending")
    booking_date = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    service = relationship("Service", back_populates="bookings")
    customer = relationship("User", back_populates="bookings", foreign_keys=[customer_id])

    # At most one active booking per (service, customer) pair
    __table_args__ = (
        Index(
            "uq_bookings_active_service_customer",
            "service_id",
            "customer_id",
            unique=True,
            sqlite_where=ACTIVE_STATUS_CLAUSE,
            postgresql_where=ACTIVE_STATUS_CLAUSE,
        ),
    )
