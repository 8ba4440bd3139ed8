"""
Location model.

Several columns are stored as JSON because older records were written with
different shapes (string vs. structured address, string vs. media-object
image, flat vs. nested coordinates). Readers must accept every shape; see
``app.services.location_formatter``.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.database import Base

location_categories = Table(
    "location_categories",
    Base.metadata,
    Column(
        "location_id", Integer, ForeignKey("locations.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    ),
)


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    slug = Column(String, index=True)
    description = Column(Text, nullable=True)
    short_description = Column(String, nullable=True)
    status = Column(String, nullable=False, default="published", index=True)

    # Legacy flat coordinates; newer records use the nested ``coordinates`` field
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    coordinates = Column(JSON, nullable=True)

    address = Column(JSON, nullable=True)
    featured_image = Column(JSON, nullable=True)
    image_url = Column(String, nullable=True)
    gallery = Column(JSON, nullable=True)

    price_range = Column(String, nullable=True, index=True)
    average_rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    visit_count = Column(Integer, nullable=False, default=0)

    business_hours = Column(JSON, nullable=True)
    contact_info = Column(JSON, nullable=True)

    is_verified = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    categories = relationship("Category", secondary=location_categories, lazy="selectin")
