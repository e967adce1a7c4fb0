"""
Modelos de Swipes y Matches

SwipeRecord es una arista dirigida (actor -> target) y es append-only.
MutualMatch se crea una sola vez por par no ordenado {A, B}.
"""

import json
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SwipeAction(str, Enum):
    LIKE = "like"
    PASS = "pass"
    SUPER_LIKE = "super_like"

    @property
    def is_interest(self) -> bool:
        """like y super_like expresan interés; pass no."""
        return self is not SwipeAction.PASS


def pair_key_for(user_id: str, other_id: str) -> str:
    """
    Clave del par no ordenado: mismo valor para (a, b) y (b, a).

    Los ids se serializan como lista JSON, así un id que contenga el
    separador no puede hacer colisionar dos pares distintos.
    """
    return json.dumps(sorted((user_id, other_id)), separators=(",", ":"))


class SwipeRecord(BaseModel):
    """Un swipe de actor_id sobre target_id."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    actor_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)
    action: SwipeAction
    created_at: datetime

    @model_validator(mode="after")
    def _check_not_self(self):
        if self.actor_id == self.target_id:
            raise ValueError("Un perfil no puede swipearse a sí mismo")
        return self

    @property
    def pair_key(self) -> str:
        return pair_key_for(self.actor_id, self.target_id)

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        return self.model_dump(mode="json")


class MutualMatch(BaseModel):
    """
    Match mutuo entre dos perfiles.

    La identidad es el par no ordenado: user_a_id y user_b_id se
    guardan ordenados, así (A, B) y (B, A) producen el mismo match.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_a_id: str = Field(..., min_length=1)
    user_b_id: str = Field(..., min_length=1)
    compatibility_score: int = Field(..., ge=0, le=100)
    matched_at: datetime
    is_active: bool = Field(default=True)

    @model_validator(mode="before")
    @classmethod
    def _normalize_order(cls, data):
        if not isinstance(data, dict):
            return data
        a, b = data.get("user_a_id"), data.get("user_b_id")
        if isinstance(a, str) and isinstance(b, str):
            if a == b:
                raise ValueError("Un match requiere dos perfiles distintos")
            if a > b:
                data = {**data, "user_a_id": b, "user_b_id": a}
        return data

    @property
    def pair_key(self) -> str:
        return pair_key_for(self.user_a_id, self.user_b_id)

    @property
    def participants(self) -> frozenset[str]:
        return frozenset((self.user_a_id, self.user_b_id))

    def other_participant(self, user_id: str) -> str:
        if user_id == self.user_a_id:
            return self.user_b_id
        if user_id == self.user_b_id:
            return self.user_a_id
        raise ValueError(f"{user_id} no participa de este match")

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        data = self.model_dump(mode="json")
        data["pair_key"] = self.pair_key
        return data


class SwipeResult(BaseModel):
    """Resultado de registrar un swipe."""

    model_config = ConfigDict(frozen=True)

    record: SwipeRecord
    is_mutual: bool
    match: Optional[MutualMatch] = None
    message: str


class SwipeStats(BaseModel):
    """Actividad de swipes de un usuario."""

    total_likes: int = 0
    total_passes: int = 0
    total_super_likes: int = 0
    mutual_matches: int = 0
    average_match_score: Optional[float] = None
