"""
Location response formatting.

Stored location documents come in several historical shapes. Each field has
a small normalizer here that inspects the runtime shape and returns one
stable value. Normalizers never raise; malformed input degrades to an empty
value.
"""

from datetime import datetime
from typing import AbstractSet, Any, Dict, List, Optional, Tuple

from app.schemas.geo import Coordinates
from app.schemas.location import FormattedCategory, FormattedLocation, GalleryItem
from app.utils.business_hours import evaluate_business_hours
from app.utils.geo import is_valid_coordinate

ADDRESS_FIELDS = ("street", "city", "state", "zip", "country")


def format_address(address: Any) -> str:
    """
    Normalize an address.

    A string is returned unchanged. A structured address joins its
    non-empty street/city/state/zip/country parts with single spaces.
    """
    if isinstance(address, str):
        return address
    if isinstance(address, dict):
        parts = []
        for key in ADDRESS_FIELDS:
            value = address.get(key)
            if value is None:
                continue
            value = str(value).strip()
            if value:
                parts.append(value)
        return " ".join(parts).strip()
    return ""


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _coordinate_pair(latitude: Any, longitude: Any) -> Optional[Tuple[float, float]]:
    lat, lng = _to_float(latitude), _to_float(longitude)
    if is_valid_coordinate(lat, lng):
        return lat, lng  # type: ignore[return-value]
    return None


def extract_coordinates(doc: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    """
    Get ``(latitude, longitude)`` from a location document.

    The nested ``coordinates`` field wins; flat ``latitude``/``longitude``
    are the fallback. Returns None when neither form is valid.
    """
    nested = doc.get("coordinates")
    if isinstance(nested, dict):
        pair = _coordinate_pair(nested.get("latitude"), nested.get("longitude"))
        if pair is not None:
            return pair
    return _coordinate_pair(doc.get("latitude"), doc.get("longitude"))


def image_url(image: Any) -> Optional[str]:
    """Resolve an image reference that is either a URL or a media object."""
    if isinstance(image, str):
        return image or None
    if isinstance(image, dict):
        url = image.get("url")
        if isinstance(url, str) and url:
            return url
    return None


def format_category(category: Any) -> Optional[FormattedCategory]:
    if isinstance(category, dict):
        if category.get("id") is None:
            return None
        return FormattedCategory(
            id=str(category["id"]),
            name=category.get("name"),
            color=category.get("color"),
        )
    if isinstance(category, (str, int)) and not isinstance(category, bool):
        return FormattedCategory(id=str(category))
    return None


def format_gallery(gallery: Any) -> List[GalleryItem]:
    if not isinstance(gallery, list):
        return []
    items = []
    for item in gallery:
        if isinstance(item, dict):
            caption = item.get("caption")
            items.append(
                GalleryItem(
                    image=image_url(item.get("image")),
                    caption=caption if isinstance(caption, str) else None,
                )
            )
        elif isinstance(item, str):
            items.append(GalleryItem(image=item))
    return items


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def format_location(
    doc: Dict[str, Any],
    saved_ids: AbstractSet[str] = frozenset(),
    subscribed_ids: AbstractSet[str] = frozenset(),
    now: Optional[datetime] = None,
) -> FormattedLocation:
    """
    Shape a location document for the mobile API.

    Args:
        doc: Location document, optionally carrying a computed ``distance``
        saved_ids: IDs (as strings) of locations the caller has saved
        subscribed_ids: IDs (as strings) of locations the caller follows
        now: Moment used for the open/closed flag, defaults to local time

    Returns:
        FormattedLocation
    """
    location_id = str(doc.get("id", ""))

    business_hours = doc.get("business_hours")
    if not isinstance(business_hours, list):
        business_hours = []
    business_hours = [entry for entry in business_hours if isinstance(entry, dict)]
    hours_status = evaluate_business_hours(business_hours, now)

    coordinates = extract_coordinates(doc)
    featured_image = image_url(doc.get("featured_image")) or image_url(doc.get("image_url"))

    categories = doc.get("categories")
    if not isinstance(categories, list):
        categories = []
    formatted_categories = [c for c in map(format_category, categories) if c is not None]

    distance = _to_float(doc.get("distance"))
    contact_info = doc.get("contact_info")
    rating = _to_float(doc.get("average_rating"))

    return FormattedLocation(
        id=location_id,
        name=_text(doc.get("name")),
        slug=doc.get("slug") if isinstance(doc.get("slug"), str) else None,
        description=_text(doc.get("description")),
        short_description=_text(doc.get("short_description")),
        address=format_address(doc.get("address")),
        coordinates=(
            Coordinates(latitude=coordinates[0], longitude=coordinates[1])
            if coordinates
            else None
        ),
        featured_image=featured_image,
        gallery=format_gallery(doc.get("gallery")),
        categories=formatted_categories,
        price_range=doc.get("price_range") if isinstance(doc.get("price_range"), str) else None,
        rating=rating or 0.0,
        review_count=_count(doc.get("review_count")),
        visit_count=_count(doc.get("visit_count")),
        business_hours=business_hours,
        is_open=hours_status.is_open,
        today_hours=hours_status.hours,
        contact_info=contact_info if isinstance(contact_info, dict) else {},
        is_verified=bool(doc.get("is_verified")),
        is_featured=bool(doc.get("is_featured")),
        is_saved=location_id in saved_ids,
        is_subscribed=location_id in subscribed_ids,
        distance=round(distance, 2) if distance is not None else None,
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )
