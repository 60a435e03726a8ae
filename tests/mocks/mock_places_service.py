"""Google Places mock service.

Returns fixed Athens sample places without calling the API.
"""

from app.schemas.place import Place, PlaceDetails, PlaceGeometry, PlaceReview
from app.services.places_service import PlacesServiceProtocol


class MockGooglePlacesService(PlacesServiceProtocol):
    """Mock Places provider that counts its calls."""

    _SAMPLE_PLACES: dict[str, dict] = {
        "ChIJ-playroom": {
            "name": "Athens Playroom",
            "address": "Kifisias 10, Marousi 151 24, Greece",
            "latitude": 38.0451,
            "longitude": 23.8069,
            "rating": 4.6,
            "user_ratings_total": 812,
            "types": ["amusement_center", "point_of_interest"],
            "phone": "210 000 0000",
            "website": None,
            "opening_hours": {"Monday": "9:00 AM - 8:00 PM"},
            "reviews": [{"author": "Maria", "rating": 5, "text": "My 4 year old loved the ball pit."}],
        },
        "ChIJ-stavros-niarchos": {
            "name": "Stavros Niarchos Park",
            "address": "Leof. Andrea Siggrou 364, Kallithea 176 74, Greece",
            "latitude": 37.9402,
            "longitude": 23.6924,
            "rating": 4.8,
            "user_ratings_total": 40213,
            "types": ["park", "tourist_attraction"],
            "phone": None,
            "website": "https://www.snfcc.org",
            "opening_hours": {},
            "reviews": [],
        },
    }

    def __init__(self) -> None:
        self.search_calls: list[str] = []
        self.details_calls: list[str] = []

    def _to_place(self, place_id: str, raw: dict) -> Place:
        return Place(
            place_id=place_id,
            name=raw["name"],
            address=raw["address"],
            geometry=PlaceGeometry(latitude=raw["latitude"], longitude=raw["longitude"]),
            types=raw["types"],
        )

    async def search(self, query: str) -> list[Place]:
        self.search_calls.append(query)
        query_lower = query.strip().lower()
        if not query_lower:
            return []
        return [
            self._to_place(place_id, raw)
            for place_id, raw in self._SAMPLE_PLACES.items()
            if query_lower in raw["name"].lower() or query_lower in raw["address"].lower()
        ]

    async def details(self, place_id: str) -> PlaceDetails | None:
        self.details_calls.append(place_id)
        raw = self._SAMPLE_PLACES.get(place_id)
        if raw is None:
            return None
        return PlaceDetails(
            **self._to_place(place_id, raw).model_dump(),
            rating=raw["rating"],
            user_ratings_total=raw["user_ratings_total"],
            photo_references=[f"places/{place_id}/photos/1"],
            opening_hours=raw["opening_hours"],
            phone=raw["phone"],
            website=raw["website"],
            reviews=[PlaceReview(**review) for review in raw["reviews"]],
        )
