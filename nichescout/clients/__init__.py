"""API clients for external research data sources."""

from nichescout.clients.reddit import RedditClient, RedditThread

__all__ = [
    "RedditClient",
    "RedditThread",
]
