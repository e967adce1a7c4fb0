"""
Modelos de compatibilidad.

Resultado del scoring de un par (viewer, candidato) y el vector
de pesos con el que se combinan las categorías.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Tolerancia para validar que los pesos sumen 1.0
WEIGHTS_SUM_TOLERANCE = 1e-6


class CompatibilityCategory(str, Enum):
    LIFESTYLE = "lifestyle"
    BUDGET = "budget"
    LOCATION = "location"
    PREFERENCES = "preferences"
    DEAL_BREAKERS = "deal_breakers"
    INTERESTS = "interests"
    AGE = "age"


class CompatibilityDetail(BaseModel):
    """Explicación de un factor puntual del score."""

    model_config = ConfigDict(frozen=True)

    category: CompatibilityCategory
    factor: str = Field(..., description="Factor evaluado, ej: 'sleep_schedule'")
    score: int = Field(..., ge=0, le=100)
    reason: str = Field(..., description="Explicación legible")
    is_positive: bool


class CompatibilityBreakdown(BaseModel):
    """
    Breakdown de compatibilidad de un candidato para un viewer.

    Se crea en cada llamada al scorer y el motor nunca lo persiste.
    """

    model_config = ConfigDict(frozen=True)

    overall: int = Field(..., ge=0, le=100)
    lifestyle: int = Field(..., ge=0, le=100)
    budget: int = Field(..., ge=0, le=100)
    location: int = Field(..., ge=0, le=100)
    preferences: int = Field(..., ge=0, le=100)
    deal_breakers: int = Field(..., ge=0, le=100)
    interests: int = Field(..., ge=0, le=100)
    age: int = Field(..., ge=0, le=100)
    details: list[CompatibilityDetail] = Field(default_factory=list)

    def category_scores(self) -> dict[CompatibilityCategory, int]:
        return {category: getattr(self, category.value) for category in CompatibilityCategory}

    def details_for(self, category: CompatibilityCategory) -> list[CompatibilityDetail]:
        return [d for d in self.details if d.category == category]


class ScoringWeights(BaseModel):
    """Pesos por categoría para el score overall. Deben sumar 1.0."""

    model_config = ConfigDict(frozen=True)

    lifestyle: float = Field(0.25, ge=0.0, le=1.0)
    budget: float = Field(0.20, ge=0.0, le=1.0)
    location: float = Field(0.15, ge=0.0, le=1.0)
    preferences: float = Field(0.15, ge=0.0, le=1.0)
    deal_breakers: float = Field(0.10, ge=0.0, le=1.0)
    interests: float = Field(0.10, ge=0.0, le=1.0)
    age: float = Field(0.05, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_sum(self):
        total = sum(self.model_dump().values())
        if abs(total - 1.0) > WEIGHTS_SUM_TOLERANCE:
            raise ValueError(f"Los pesos deben sumar 1.0 (suman {total:.4f})")
        return self

    def for_category(self, category: CompatibilityCategory) -> float:
        return getattr(self, category.value)
