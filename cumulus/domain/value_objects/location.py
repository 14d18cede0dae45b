"""
Location Value Object

Architectural Intent:
- Immutable, provider-neutral description of where compute resources live
- Used as a grouping key when fanning out work per region/zone
- Equality is identity-based: (scope, id); descriptive fields never affect grouping
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class LocationScope(Enum):
    PROVIDER = "provider"
    REGION = "region"
    ZONE = "zone"
    HOST = "host"


@dataclass(frozen=True)
class Location:
    """
    Value Object representing a provider region, zone or host.
    """
    scope: LocationScope
    id: str
    description: str = field(default="", compare=False)
    parent: Optional[Location] = field(default=None, compare=False, repr=False)
    iso3166_codes: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Location id cannot be empty")

    def __str__(self) -> str:
        return f"{self.scope.value}:{self.id}"

    @property
    def region(self) -> Optional[Location]:
        """Nearest enclosing REGION, or self when this is a region."""
        current: Optional[Location] = self
        while current is not None:
            if current.scope is LocationScope.REGION:
                return current
            current = current.parent
        return None

    def with_zone(self, zone_id: str, description: str = "") -> Location:
        """Build a child ZONE location that inherits this location's ISO codes."""
        return Location(
            scope=LocationScope.ZONE,
            id=zone_id,
            description=description or zone_id,
            parent=self,
            iso3166_codes=self.iso3166_codes,
        )
