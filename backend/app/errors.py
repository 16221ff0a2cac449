class PlaylistError(Exception):
    """Base class for every error the playlist generator raises on purpose."""

    default_message = "Playlist generation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PlaylistError):
    default_message = "Se requiere al menos un participante."


class ProviderQueryError(PlaylistError):
    """A single YouTube search failed. Never leaves the aggregator."""

    default_message = "YouTube search failed."

    def __init__(self, query: str, message: str | None = None, status_code: int | None = None):
        self.query = query
        self.status_code = status_code
        super().__init__(message)


class ProviderQuotaExceededError(ProviderQueryError):
    default_message = "YouTube API quota exceeded"


class EmptyResultError(PlaylistError):
    default_message = (
        "No se encontraron videos con las preferencias seleccionadas. "
        "Intenta con géneros más generales."
    )


class PlaybackExhaustedError(PlaylistError):
    default_message = (
        "Todos los videos de la lista generada están bloqueados. "
        "Intenta con géneros diferentes."
    )


class TransportError(PlaylistError):
    default_message = (
        "Error al conectar con el servidor o la API de música. "
        "Revisa la consola y el backend."
    )
