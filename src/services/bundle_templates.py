"""
Role templates for outfit bundles.

A template is a named, ordered mapping of role -> allowed categories. Each
(scenario, audience) pair has an ordered template list: richer looks first,
simpler looks after. Scenarios without overrides use the audience defaults.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class RoleTemplate:
    """Named, ordered role -> categories mapping."""

    name: str
    roles: Tuple[Tuple[str, Tuple[str, ...]], ...]

    @property
    def role_names(self) -> List[str]:
        return [role for role, _ in self.roles]

    def categories_for(self, role: str) -> Tuple[str, ...]:
        for name, categories in self.roles:
            if name == role:
                return categories
        return ()

    def role_for_category(self, category: str) -> Optional[str]:
        """First role in this template that accepts the category."""
        for role, categories in self.roles:
            if category in categories:
                return role
        return None

    def to_dict(self) -> Dict[str, List[str]]:
        return {role: list(categories) for role, categories in self.roles}


def _template(name: str, *roles: Tuple[str, Tuple[str, ...]]) -> RoleTemplate:
    return RoleTemplate(name=name, roles=tuple(roles))


# =============================================================================
# Audience defaults
# =============================================================================

WOMEN_DRESS_LOOK = _template(
    "dress_look",
    ("primary", ("Dresses",)),
    ("footwear", ("Heels", "Flats", "Sneakers")),
    ("addOn", ("Clutches", "Blazers")),
)

WOMEN_SEPARATES = _template(
    "separates",
    ("top", ("Blouses", "Tees")),
    ("bottom", ("Trousers", "Skirts")),
    ("footwear", ("Heels", "Flats", "Sneakers")),
)

MEN_TAILORED = _template(
    "tailored",
    ("top", ("Shirts", "Polos")),
    ("bottom", ("Chinos", "Jeans")),
    ("footwear", ("Loafers", "Derbies", "Sneakers")),
)

MEN_LAYERED = _template(
    "layered",
    ("addOn", ("Blazers",)),
    ("top", ("Shirts", "Polos", "Tees")),
    ("footwear", ("Loafers", "Derbies", "Sneakers")),
)

UNISEX_SEPARATES = _template(
    "separates",
    ("top", ("Overshirts", "Tees", "Hoodies")),
    ("bottom", ("Trousers",)),
    ("footwear", ("Sneakers",)),
)

UNISEX_LAYERED = _template(
    "layered",
    ("addOn", ("Jackets", "Backpacks", "Sunglasses", "Beanies")),
    ("top", ("Overshirts", "Tees", "Hoodies")),
    ("footwear", ("Sneakers",)),
)

DEFAULT_TEMPLATES: Dict[str, List[RoleTemplate]] = {
    "women": [WOMEN_SEPARATES, WOMEN_DRESS_LOOK],
    "men": [MEN_TAILORED, MEN_LAYERED],
    "unisex": [UNISEX_SEPARATES, UNISEX_LAYERED],
}


# =============================================================================
# Scenario overrides
# =============================================================================

CAMPUS_WOMEN = _template(
    "campus",
    ("top", ("Tees", "Blouses")),
    ("bottom", ("Trousers", "Skirts")),
    ("footwear", ("Sneakers", "Flats")),
)

CAMPUS_MEN = _template(
    "campus",
    ("top", ("Tees", "Polos", "Shirts")),
    ("bottom", ("Jeans", "Chinos")),
    ("footwear", ("Sneakers",)),
)

CAMPUS_UNISEX = _template(
    "campus",
    ("top", ("Tees", "Hoodies", "Overshirts")),
    ("bottom", ("Trousers",)),
    ("footwear", ("Sneakers",)),
)

SCENARIO_TEMPLATES: Dict[Tuple[str, str], List[RoleTemplate]] = {
    ("summer_wedding", "women"): [WOMEN_DRESS_LOOK, WOMEN_SEPARATES],
    ("chi_winter", "men"): [MEN_LAYERED, MEN_TAILORED],
    ("chi_winter", "unisex"): [UNISEX_LAYERED, UNISEX_SEPARATES],
    ("campus", "women"): [CAMPUS_WOMEN, WOMEN_SEPARATES],
    ("campus", "men"): [CAMPUS_MEN, MEN_TAILORED],
    ("campus", "unisex"): [CAMPUS_UNISEX, UNISEX_LAYERED],
}


def templates_for(scenario_id: Optional[str], audience: str) -> List[RoleTemplate]:
    """Ordered templates for a scenario/audience pair."""
    key = (scenario_id or "", audience)
    if key in SCENARIO_TEMPLATES:
        return list(SCENARIO_TEMPLATES[key])
    return list(DEFAULT_TEMPLATES.get(audience, []))
