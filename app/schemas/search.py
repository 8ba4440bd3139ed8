"""
Search Schemas

Response shapes for the mobile global search endpoint.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.location import FormattedLocation


class SearchType(str, Enum):
    ALL = "all"
    USERS = "users"
    LOCATIONS = "locations"
    EVENTS = "events"
    POSTS = "posts"


class UserSearchResult(CamelModel):
    id: str
    name: Optional[str] = None
    username: str
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    follower_count: int = 0
    is_following: bool = False
    is_verified: bool = False


class RelatedRef(CamelModel):
    id: str
    name: str


class EventSearchResult(CamelModel):
    id: str
    title: str
    slug: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    featured_image: Optional[str] = None
    category: Optional[str] = None
    event_type: Optional[str] = None
    location: Optional[RelatedRef] = None
    organizer: Optional[RelatedRef] = None
    participant_count: int = 0
    max_participants: Optional[int] = None
    is_matchmaking: bool = False
    distance: Optional[float] = None


class PostSearchResult(CamelModel):
    id: str
    title: Optional[str] = None
    content: Optional[str] = None
    caption: Optional[str] = None
    featured_image: Optional[str] = None
    author: Optional[RelatedRef] = None
    location: Optional[RelatedRef] = None
    like_count: int = 0
    comment_count: int = 0
    created_at: Optional[datetime] = None


class SearchResults(CamelModel):
    users: List[UserSearchResult] = Field(default_factory=list)
    locations: List[FormattedLocation] = Field(default_factory=list)
    events: List[EventSearchResult] = Field(default_factory=list)
    posts: List[PostSearchResult] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.users) + len(self.locations) + len(self.events) + len(self.posts)


class SearchMeta(CamelModel):
    total_results: int
    filters: Dict[str, Any] = Field(default_factory=dict)
    search_time: int = Field(..., description="Server time of the search in epoch milliseconds")


class SearchData(CamelModel):
    query: str
    type: SearchType
    results: SearchResults
    meta: SearchMeta


class SearchResponse(CamelModel):
    success: bool = True
    message: str
    data: SearchData


class SuggestionData(CamelModel):
    query: str
    suggestions: List[str] = Field(default_factory=list)


class SuggestionResponse(CamelModel):
    success: bool = True
    data: SuggestionData
