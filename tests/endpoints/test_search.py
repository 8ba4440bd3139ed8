"""
Tests for the mobile search endpoints.
"""

from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.event import Event
from app.models.post import Post
from app.services.search_service import SearchServiceError
from tests.helpers import BOSTON, create_location, create_test_user, get_auth_header, north_of

SEARCH_URL = "/api/v1/mobile/search"


def seed_content(db: Session):
    """Helper function to create one searchable item of every type"""
    create_test_user(db, "harborwalker", name="Harbor Walker")
    location = create_location(db, "Harbor Cafe", coordinates=north_of(BOSTON, 1))
    db.add(Event(title="Harbor Festival", status="published", location_id=location.id))
    db.add(Post(title="Harbor sunset", status="published"))
    db.commit()


def test_search_all_types(db: Session, client: TestClient):
    """Test searching every content type at once."""
    seed_content(db)

    response = client.get(SEARCH_URL, params={"q": "harbor"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["query"] == "harbor"
    assert data["type"] == "all"
    assert [u["username"] for u in data["results"]["users"]] == ["harborwalker"]
    assert [loc["name"] for loc in data["results"]["locations"]] == ["Harbor Cafe"]
    assert [e["title"] for e in data["results"]["events"]] == ["Harbor Festival"]
    assert [p["title"] for p in data["results"]["posts"]] == ["Harbor sunset"]
    assert data["meta"]["totalResults"] == 4
    assert isinstance(data["meta"]["searchTime"], int)


def test_search_single_type(db: Session, client: TestClient):
    """Test that other result lists stay empty for a single-type search."""
    seed_content(db)

    response = client.get(SEARCH_URL, params={"q": "harbor", "type": "events"})

    results = response.json()["data"]["results"]
    assert len(results["events"]) == 1
    assert results["users"] == []
    assert results["locations"] == []
    assert results["posts"] == []


def test_search_all_splits_limit(db: Session, client: TestClient):
    """Test that each type gets a quarter of the limit when searching all."""
    for i in range(3):
        create_location(db, f"Harbor Spot {i}")

    all_response = client.get(SEARCH_URL, params={"q": "harbor", "limit": 4})
    single_response = client.get(
        SEARCH_URL, params={"q": "harbor", "limit": 4, "type": "locations"}
    )

    assert len(all_response.json()["data"]["results"]["locations"]) == 1
    assert len(single_response.json()["data"]["results"]["locations"]) == 3


def test_search_with_coordinates(db: Session, client: TestClient):
    """Test radius filtering and filter echo in metadata."""
    create_location(db, "Harbor Near", coordinates=north_of(BOSTON, 2))
    create_location(db, "Harbor Far", coordinates=north_of(BOSTON, 40))

    response = client.get(
        SEARCH_URL,
        params={
            "q": "harbor",
            "type": "locations",
            "latitude": BOSTON[0],
            "longitude": BOSTON[1],
            "radius": 10,
        },
    )

    data = response.json()["data"]
    assert [loc["name"] for loc in data["results"]["locations"]] == ["Harbor Near"]
    assert data["meta"]["filters"] == {
        "latitude": BOSTON[0],
        "longitude": BOSTON[1],
        "radius": 10,
    }


def test_search_query_too_short(client: TestClient):
    """Test that one-character queries are rejected."""
    response = client.get(SEARCH_URL, params={"q": " a "})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "at least 2 characters" in body["error"]


def test_search_invalid_type(client: TestClient):
    """Test that unknown search types are rejected."""
    response = client.get(SEARCH_URL, params={"q": "harbor", "type": "places"})

    assert response.status_code == 400


def test_search_lone_longitude(client: TestClient):
    """Test that coordinates must come in pairs."""
    response = client.get(SEARCH_URL, params={"q": "harbor", "longitude": -71.06})

    assert response.status_code == 400


def test_search_excludes_caller_and_flags_following(db: Session, client: TestClient):
    """Test user results for an authenticated caller."""
    caller = create_test_user(db, "harborcaller")
    followed = create_test_user(db, "harborfriend")
    create_test_user(db, "harborstranger")
    caller.following.append(followed)
    db.commit()

    response = client.get(
        SEARCH_URL,
        params={"q": "harbor", "type": "users"},
        headers=get_auth_header(caller.id),
    )

    users = response.json()["data"]["results"]["users"]
    assert [(u["username"], u["isFollowing"]) for u in users] == [
        ("harborfriend", True),
        ("harborstranger", False),
    ]


def test_search_service_failure(client: TestClient):
    """Test that search failures become a SERVER_ERROR."""
    with patch(
        "app.api.v1.endpoints.search.search_service.search_posts",
        side_effect=SearchServiceError("Post search failed"),
    ):
        response = client.get(SEARCH_URL, params={"q": "harbor", "type": "posts"})

    assert response.status_code == 500
    assert response.json()["code"] == "SERVER_ERROR"


def test_suggestions_anonymous(db: Session, client: TestClient):
    """Test that anonymous callers only get popular terms."""
    create_location(db, "Coffee Corner")

    response = client.get(f"{SEARCH_URL}/suggestions", params={"q": "coff"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["query"] == "coff"
    assert data["suggestions"] == ["coffee shops"]


def test_suggestions_authenticated(db: Session, client: TestClient):
    """Test that authenticated callers also get location names."""
    user = create_test_user(db)
    create_location(db, "Coffee Corner")

    response = client.get(
        f"{SEARCH_URL}/suggestions", params={"q": "coff"}, headers=get_auth_header(user.id)
    )

    assert response.json()["data"]["suggestions"] == ["coffee shops", "Coffee Corner"]
