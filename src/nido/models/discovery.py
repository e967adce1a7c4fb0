"""
Modelos de Discovery

Filtros de un request de discovery y el feed rankeado resultante.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from nido.models.compatibility import CompatibilityBreakdown
from nido.models.profile import AgeRange, BudgetRange, Gender, HousingType, Profile


class DiscoveryFilters(BaseModel):
    """
    Filtros hard de un request de discovery.

    Un candidato que no cumple alguno se descarta antes del scoring.
    Colecciones vacías significan "cualquiera".
    """

    model_config = ConfigDict(frozen=True)

    age_range: AgeRange = Field(default_factory=lambda: AgeRange(min=18, max=99))
    budget_range: Optional[BudgetRange] = Field(
        None, description="Presupuesto aceptable (None = sin filtro)"
    )
    genders: frozenset[Gender] = Field(default_factory=frozenset)
    housing_types: frozenset[HousingType] = Field(default_factory=frozenset)
    min_compatibility_score: int = Field(default=0, ge=0, le=100)
    require_photos: bool = Field(default=False)
    require_verified: bool = Field(default=False)


class RankedCandidate(BaseModel):
    """Candidato del feed con su breakdown de compatibilidad."""

    model_config = ConfigDict(frozen=True)

    profile: Profile
    compatibility: CompatibilityBreakdown

    @property
    def profile_id(self) -> str:
        return self.profile.id

    @property
    def score(self) -> int:
        return self.compatibility.overall


class DiscoveryPage(BaseModel):
    """Feed de discovery truncado a `limit`."""

    model_config = ConfigDict(frozen=True)

    candidates: list[RankedCandidate] = Field(default_factory=list)
    total_eligible: int = Field(..., ge=0)
    has_more: bool


class SearchResults(BaseModel):
    """Página de resultados de búsqueda por texto."""

    model_config = ConfigDict(frozen=True)

    candidates: list[RankedCandidate] = Field(default_factory=list)
    total_count: int = Field(..., ge=0)
    has_more: bool
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
