"""
Location Schemas

Query parameters and response shapes for the mobile location endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from app.core.config import settings
from app.schemas.base import CamelModel
from app.schemas.geo import Coordinates


class PriceRange(str, Enum):
    FREE = "free"
    BUDGET = "budget"
    MODERATE = "moderate"
    EXPENSIVE = "expensive"
    LUXURY = "luxury"


class LocationSortKey(str, Enum):
    DISTANCE = "distance"
    RATING = "rating"
    POPULARITY = "popularity"
    NAME = "name"
    CREATED_AT = "createdAt"


class LocationListType(str, Enum):
    ALL = "all"
    RECOMMENDED = "recommended"
    CREATED = "created"
    SAVED = "saved"


class LocationQuery(BaseModel):
    """Validated parameters of a location listing request."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    search: Optional[str] = None
    category: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    radius: float = Field(
        default=settings.DEFAULT_RADIUS_KM,
        ge=1,
        le=settings.MAX_RADIUS_KM,
        description="Search radius in km",
    )
    price_range: Optional[PriceRange] = None
    rating: Optional[float] = Field(default=None, ge=1, le=5)
    sort_by: LocationSortKey = LocationSortKey.DISTANCE
    is_open: Optional[bool] = None
    list_type: LocationListType = LocationListType.ALL
    # Set from the caller's identity for ``created`` and ``saved`` listings
    created_by: Optional[int] = None
    location_ids: Optional[List[int]] = None

    @model_validator(mode="after")
    def check_coordinate_pair(self) -> "LocationQuery":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self

    @property
    def origin(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    @property
    def needs_refinement(self) -> bool:
        """Whether results depend on values the store cannot filter on."""
        return (
            self.origin is not None
            or self.is_open is not None
            or self.list_type == LocationListType.RECOMMENDED
        )


class FormattedCategory(CamelModel):
    id: str
    name: Optional[str] = None
    color: Optional[str] = None


class GalleryItem(CamelModel):
    image: Optional[str] = None
    caption: Optional[str] = None


class FormattedLocation(CamelModel):
    id: str
    name: str = ""
    slug: Optional[str] = None
    description: str = ""
    short_description: str = ""
    address: str = ""
    coordinates: Optional[Coordinates] = None
    featured_image: Optional[str] = None
    gallery: List[GalleryItem] = Field(default_factory=list)
    categories: List[FormattedCategory] = Field(default_factory=list)
    price_range: Optional[str] = None
    rating: float = 0.0
    review_count: int = 0
    visit_count: int = 0
    business_hours: List[Dict[str, Any]] = Field(default_factory=list)
    is_open: bool = False
    today_hours: Optional[str] = None
    contact_info: Dict[str, Any] = Field(default_factory=dict)
    is_verified: bool = False
    is_featured: bool = False
    is_saved: bool = False
    is_subscribed: bool = False
    distance: Optional[float] = Field(default=None, description="Distance in km")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class LocationListMeta(CamelModel):
    search: Optional[str] = None
    category: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    radius: Optional[float] = None
    price_range: Optional[str] = None
    rating: Optional[float] = None
    sort_by: str
    type: str = "all"
    is_open: Optional[bool] = None


class LocationListData(CamelModel):
    locations: List[FormattedLocation]
    pagination: Pagination
    meta: LocationListMeta


class LocationListResponse(CamelModel):
    success: bool = True
    message: str
    data: LocationListData


class LocationDetailData(CamelModel):
    location: FormattedLocation


class LocationDetailResponse(CamelModel):
    success: bool = True
    message: str
    data: LocationDetailData


class InteractionAction(str, Enum):
    SAVE = "save"
    UNSAVE = "unsave"
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class InteractionRequest(BaseModel):
    action: InteractionAction


class InteractionState(CamelModel):
    location_id: str
    is_saved: bool
    is_subscribed: bool


class InteractionResponse(CamelModel):
    success: bool = True
    message: str
    data: InteractionState
