from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, ForeignKey, Numeric, DateTime, CheckConstraint
import uuid
from marketplace.database import Base
from sqlalchemy.orm import relationship


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False, index=True)
    city = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, default=True)
    provider_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    provider = relationship("User", back_populates="services")
    bookings = relationship("Booking", back_populates="service")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_price_non_negative"),
    )
