from typing import Any

try:
    from backend.app.config import (
        AGE_CUTOFF,
        CLASSIC_AGE_CONTEXT,
        COUNTRY_PRIORITY_TERM,
        OFFICIAL_CONTENT_SUFFIX,
        YOUNG_AGE_CONTEXT,
    )
except ModuleNotFoundError:
    from app.config import (
        AGE_CUTOFF,
        CLASSIC_AGE_CONTEXT,
        COUNTRY_PRIORITY_TERM,
        OFFICIAL_CONTENT_SUFFIX,
        YOUNG_AGE_CONTEXT,
    )


AVAILABLE_GENRES = [
    # Pop and trends
    "Pop Latino",
    "Reggaeton Actual",
    "Trap",
    "Hip Hop",
    "Indie",
    # Rock and classics
    "Rock Clásico (80s/90s)",
    "Rock Alternativo",
    "Rock en Español",
    "Música de los 80s",
    # Electronic
    "Electrónica (EDM)",
    "House",
    # Tropical, split into subgenres so the exclusions below can bite
    "Salsa Clásica (Dura)",
    "Salsa Romántica",
    "Cumbia Norteña",
    "Cumbia Sureña",
    "Merengue Clásico",
    # Current hits
    "Temas Actuales (Top Hits)",
]

# Ordered: the first pattern found in the genre label wins, the rest are skipped.
GENRE_REFINEMENT_RULES: list[tuple[str, str]] = [
    ("Cumbia", "-salsa -son -tumbao -clave"),
    ("Salsa", "-cumbia -vallenato -tropical -colombiana"),
    ("Rock Clásico", "-pop -balada"),
]


def age_context(age: int) -> str:
    return YOUNG_AGE_CONTEXT if age < AGE_CUTOFF else CLASSIC_AGE_CONTEXT


def refinement_for_genre(genre: str) -> str | None:
    for pattern, negative_terms in GENRE_REFINEMENT_RULES:
        if pattern in genre:
            return negative_terms
    return None


def build_search_query(genre: str, age: int) -> str:
    query = f"{genre} {age_context(age)} {COUNTRY_PRIORITY_TERM} {OFFICIAL_CONTENT_SUFFIX}"
    refinement = refinement_for_genre(genre)
    if refinement:
        query = f"{query} {refinement}"
    return query


def _field(participant: Any, name: str) -> Any:
    if isinstance(participant, dict):
        return participant.get(name)
    return getattr(participant, name, None)


def derive_queries(participants: list[Any]) -> list[str]:
    """
    One query per participant x genre. Repeats across participants are kept on
    purpose: each person's taste counts toward the mix.
    """
    queries: list[str] = []
    for participant in participants:
        age = int(_field(participant, "age") or 0)
        for genre in _field(participant, "genres") or []:
            queries.append(build_search_query(genre, age))
    return queries
