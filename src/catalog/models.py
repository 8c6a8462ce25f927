"""
Catalog record types.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Product:
    """Immutable catalog product.

    Serialized with the camelCase keys the storefront uses
    (``imageUrl``, ``occasionTags``, ``scenarioId``...).
    """

    id: str
    title: str
    brand: str
    price: int
    category: str
    color: str
    style: str
    description: str
    scenario_id: str
    audience: str
    image_url: str = ""
    size: Optional[str] = None
    fit: Optional[str] = None
    occasion_tags: Tuple[str, ...] = field(default_factory=tuple)
    formality: str = "smart_casual"
    palette: str = "neutral"
    bundle_role: str = "core"
    in_stock: bool = True
    stock_count: int = 0
    delivery_days: int = 3
    season: str = "all"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "brand": self.brand,
            "price": self.price,
            "imageUrl": self.image_url,
            "category": self.category,
            "color": self.color,
            "size": self.size,
            "fit": self.fit,
            "occasionTags": list(self.occasion_tags),
            "style": self.style,
            "description": self.description,
            "scenarioId": self.scenario_id,
            "audience": self.audience,
            "formality": self.formality,
            "palette": self.palette,
            "bundleRole": self.bundle_role,
            "inStock": self.in_stock,
            "stockCount": self.stock_count,
            "deliveryDays": self.delivery_days,
            "season": self.season,
        }

    def to_summary(self) -> Dict[str, Any]:
        """Projection returned in result lists and carts."""
        return {
            "id": self.id,
            "title": self.title,
            "brand": self.brand,
            "price": self.price,
            "imageUrl": self.image_url,
            "category": self.category,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """Build a product from a camelCase catalog row.

        Raises:
            KeyError: If a required field is missing.
        """
        product_id = data["id"]
        return cls(
            id=product_id,
            title=data["title"],
            brand=data["brand"],
            price=int(data["price"]),
            image_url=data.get("imageUrl") or f"/api/images/{product_id}",
            category=data["category"],
            color=data["color"],
            size=data.get("size"),
            fit=data.get("fit"),
            occasion_tags=tuple(data.get("occasionTags") or ()),
            style=data.get("style", ""),
            description=data.get("description", ""),
            scenario_id=data["scenarioId"],
            audience=data["audience"],
            formality=data.get("formality", "smart_casual"),
            palette=data.get("palette", "neutral"),
            bundle_role=data.get("bundleRole", "core"),
            in_stock=bool(data.get("inStock", True)),
            stock_count=int(data.get("stockCount", 0)),
            delivery_days=int(data.get("deliveryDays", 3)),
            season=data.get("season", "all"),
        )
