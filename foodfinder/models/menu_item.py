from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class MenuItem:
    """Menu entry embedded in Store.menu_items, joined to reviews by name."""

    name: str
    price: float = 0.0
    image_url: Optional[str] = None
    is_available: bool = True
    avg_rating: float = 0.0
    review_count: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MenuItem":
        return cls(
            name=data.get("name", ""),
            price=float(data.get("price") or 0),
            image_url=data.get("image_url"),
            is_available=bool(data.get("is_available", True)),
            avg_rating=float(data.get("avg_rating") or 0),
            review_count=int(data.get("review_count") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
