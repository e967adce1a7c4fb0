"""
Modelo de Perfil

Snapshot inmutable de los atributos de un candidato que usa el scoring:
estilo de vida, preferencias de roommate, ubicación e intereses.
Todos los campos opcionales pueden faltar; el scorer los trata como
"desconocidos" y asigna un score neutral.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NON_BINARY = "non-binary"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


class GenderPreference(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NON_BINARY = "non-binary"
    NO_PREFERENCE = "no-preference"


class SleepSchedule(str, Enum):
    EARLY_BIRD = "early-bird"
    NIGHT_OWL = "night-owl"
    FLEXIBLE = "flexible"


# Cleanliness y SocialLevel son ordinales: el orden de definición
# es el que usa la distancia ordinal del scorer.
class Cleanliness(str, Enum):
    VERY_CLEAN = "very-clean"
    MODERATELY_CLEAN = "moderately-clean"
    RELAXED = "relaxed"


class SocialLevel(str, Enum):
    VERY_SOCIAL = "very-social"
    MODERATELY_SOCIAL = "moderately-social"
    PREFER_QUIET = "prefer-quiet"


class GuestsPolicy(str, Enum):
    FREQUENT = "frequent-guests"
    OCCASIONAL = "occasional-guests"
    RARE = "rare-guests"
    NONE = "no-guests"


class Smoking(str, Enum):
    SMOKER = "smoker"
    NON_SMOKER = "non-smoker"
    SOCIAL_SMOKER = "social-smoker"
    NO_PREFERENCE = "no-preference"


class Drinking(str, Enum):
    REGULAR = "regular"
    SOCIAL = "social"
    RARELY = "rarely"
    NEVER = "never"
    NO_PREFERENCE = "no-preference"


class Pets(str, Enum):
    HAVE_PETS = "have-pets"
    LOVE_PETS = "love-pets"
    ALLERGIC = "allergic"
    NO_PETS = "no-pets"
    NO_PREFERENCE = "no-preference"


class WorkSchedule(str, Enum):
    TRADITIONAL = "traditional"
    REMOTE = "remote"
    SHIFT_WORK = "shift-work"
    STUDENT = "student"
    UNEMPLOYED = "unemployed"


class HousingType(str, Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    CONDO = "condo"
    STUDIO = "studio"
    SHARED_ROOM = "shared-room"


class Location(BaseModel):
    """Ubicación declarada del perfil."""

    model_config = ConfigDict(frozen=True)

    city: Optional[str] = Field(None, description="Ciudad")
    state: Optional[str] = Field(None, description="Estado/Provincia")
    country: Optional[str] = Field(None, description="País")


class AgeRange(BaseModel):
    """Rango de edad [min, max], ambos inclusive."""

    model_config = ConfigDict(frozen=True)

    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min > self.max:
            raise ValueError(f"Rango de edad inválido: min {self.min} > max {self.max}")
        return self

    def contains(self, age: int) -> bool:
        return self.min <= age <= self.max


class BudgetRange(BaseModel):
    """Rango de presupuesto mensual [min, max] en una moneda."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)
    currency: str = Field(default="USD", description="Código de moneda")

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min > self.max:
            raise ValueError(
                f"Rango de presupuesto inválido: min {self.min} > max {self.max}"
            )
        return self

    def overlaps(self, other_min: float, other_max: float) -> bool:
        """True si [min, max] se superpone con [other_min, other_max]."""
        return not (self.max < other_min or self.min > other_max)


class DealBreakers(BaseModel):
    """Atributos que, presentes en un candidato, anulan la compatibilidad."""

    model_config = ConfigDict(frozen=True)

    smoking: bool = False
    pets: bool = False
    parties: bool = False
    overnight_guests: bool = False

    def any_set(self) -> bool:
        return self.smoking or self.pets or self.parties or self.overnight_guests


class Lifestyle(BaseModel):
    """Hábitos de convivencia."""

    model_config = ConfigDict(frozen=True)

    sleep_schedule: Optional[SleepSchedule] = None
    cleanliness: Optional[Cleanliness] = None
    social_level: Optional[SocialLevel] = None
    guests_policy: Optional[GuestsPolicy] = None
    smoking: Optional[Smoking] = None
    drinking: Optional[Drinking] = None
    pets: Optional[Pets] = None
    work_schedule: Optional[WorkSchedule] = None
    work_from_home: Optional[bool] = None


class RoommatePreferences(BaseModel):
    """Lo que el perfil busca en un roommate."""

    model_config = ConfigDict(frozen=True)

    age_range: Optional[AgeRange] = Field(None, description="Edad deseada del roommate")
    gender_preference: Optional[GenderPreference] = Field(
        None, description="Género deseado del roommate"
    )
    housing_types: Optional[list[HousingType]] = Field(
        None, description="Tipos de vivienda aceptables"
    )
    budget_range: Optional[BudgetRange] = Field(None, description="Presupuesto mensual")
    deal_breakers: Optional[DealBreakers] = Field(None, description="Deal breakers")


class Profile(BaseModel):
    """
    Perfil de un candidato.

    Es un snapshot provisto por el caller en cada request: el motor
    no es dueño del almacenamiento de perfiles.
    """

    model_config = ConfigDict(frozen=True)

    # Identificación
    id: str = Field(..., min_length=1, description="ID único del perfil")

    # Datos básicos
    birth_date: Optional[date] = Field(None, description="Fecha de nacimiento")
    gender: Optional[Gender] = Field(None, description="Género")
    location: Optional[Location] = Field(None, description="Ciudad y estado")

    # Convivencia y búsqueda
    lifestyle: Optional[Lifestyle] = None
    roommate: Optional[RoommatePreferences] = None
    interests: list[str] = Field(default_factory=list, description="Intereses")

    # Verificación y fotos
    is_verified: bool = Field(default=False)
    photo_count: int = Field(default=0, ge=0)

    # Campos de presentación (solo los usa la búsqueda por texto)
    bio: Optional[str] = None
    occupation: Optional[str] = None
    updated_at: Optional[datetime] = None

    def age_on(self, today: date) -> Optional[int]:
        """Edad en años cumplidos a la fecha indicada (None si no hay fecha de nacimiento)."""
        if self.birth_date is None:
            return None
        return calculate_age(self.birth_date, today)


def calculate_age(birth_date: date, today: date) -> int:
    """Años cumplidos entre birth_date y today."""
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return today.year - birth_date.year - int(before_birthday)
