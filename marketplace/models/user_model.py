from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean
import uuid
from marketplace.database import Base
from sqlalchemy.orm import relationship


class User(Base):
    """A marketplace profile; customers and providers share this table."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    full_name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    services = relationship("Service", back_populates="provider")
    bookings = relationship("Booking", back_populates="customer", foreign_keys="Booking.customer_id")
