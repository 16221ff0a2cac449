from backend.app.config import AGE_CUTOFF
from backend.app.services.genres import (
    AVAILABLE_GENRES,
    age_context,
    build_search_query,
    derive_queries,
    refinement_for_genre,
)


def test_age_context_threshold():
    assert age_context(AGE_CUTOFF - 1) == "tendencias actual"
    assert age_context(AGE_CUTOFF) == "clasicos de todos los tiempos"
    assert age_context(60) == "clasicos de todos los tiempos"


def test_plain_genre_query():
    assert build_search_query("Trap", 20) == (
        "Trap tendencias actual Peruano OR Peruana official video OR lyrics"
    )


def test_cumbia_and_salsa_exclude_each_other():
    cumbia = build_search_query("Cumbia Sureña", 30)
    salsa = build_search_query("Salsa Romántica", 30)
    assert cumbia.endswith("official video OR lyrics -salsa -son -tumbao -clave")
    assert salsa.endswith("official video OR lyrics -cumbia -vallenato -tropical -colombiana")
    assert "clasicos de todos los tiempos" in cumbia


def test_rock_clasico_excludes_pop():
    assert build_search_query("Rock Clásico (80s/90s)", 50).endswith("-pop -balada")
    assert refinement_for_genre("Rock Alternativo") is None


def test_first_matching_rule_wins():
    # a label matching both families only gets the first exclusion set
    assert refinement_for_genre("Cumbia con Salsa") == "-salsa -son -tumbao -clave"


def test_derive_queries_is_a_cross_product():
    participants = [
        {"age": 18, "genres": ["Trap", "House"]},
        {"age": 45, "genres": ["House"]},
        {"age": 30, "genres": ["Salsa Clásica (Dura)", "Indie", "Hip Hop"]},
    ]
    queries = derive_queries(participants)
    assert len(queries) == 6
    house = [q for q in queries if q.startswith("House")]
    assert house == [
        "House tendencias actual Peruano OR Peruana official video OR lyrics",
        "House clasicos de todos los tiempos Peruano OR Peruana official video OR lyrics",
    ]


def test_catalog_has_no_duplicates():
    assert len(AVAILABLE_GENRES) == len(set(AVAILABLE_GENRES))
    assert "Salsa Clásica (Dura)" in AVAILABLE_GENRES
