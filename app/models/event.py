from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    slug = Column(String, index=True)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    event_type = Column(String, nullable=True)
    status = Column(String, nullable=False, default="published", index=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    featured_image_url = Column(String, nullable=True)
    max_participants = Column(Integer, nullable=True)
    participant_count = Column(Integer, nullable=False, default=0)
    is_matchmaking = Column(Boolean, nullable=False, default=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=True, index=True)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    location = relationship("Location")
    organizer = relationship("User")
