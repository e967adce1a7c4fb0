"""
Errores del motor de matching.

Los errores de input heredan de ValueError y los de perfiles
inexistentes de LookupError, para que el caller pueda atraparlos
sin conocer esta jerarquía.
"""


class NidoError(Exception):
    """Base de todos los errores de nido."""


class InvalidInputError(NidoError, ValueError):
    """Input rechazado antes de tocar cualquier estado."""


class ProfileNotFoundError(NidoError, LookupError):
    """El store de perfiles no resolvió un id referenciado por el caller."""

    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__(f"Perfil no encontrado: {profile_id}")


class MatchNotFoundError(NidoError, LookupError):
    """No existe un match mutuo para el par indicado."""

    def __init__(self, user_id: str, other_id: str):
        self.user_id = user_id
        self.other_id = other_id
        super().__init__(f"No hay match entre {user_id} y {other_id}")
