"""
Clients for the social platforms whose posts get analyzed.
"""

from .reddit import RedditClient, extract_username

__all__ = ["RedditClient", "extract_username"]
