"""NicheScout: sequential LLM market-research pipeline with an idea bank."""

__version__ = "0.1.0"
