"""FastAPI dependencies for search engine access."""


def get_search_engine():
    """Dependency to get the search engine instance (singleton pattern)."""
    from orchestrator.core import build_search_engine

    if not hasattr(get_search_engine, "_instance"):
        get_search_engine._instance = build_search_engine()
    return get_search_engine._instance
