"""
Exception hierarchy for the profile analysis pipeline.

Degenerate numeric input (zero norms, flat normalization columns, zero total
mass, empty batches) never raises; those resolve to documented 0.0 / "NONE"
fallbacks inside the ranking engine. Only programmer errors and collaborator
failures are represented here.
"""


class SeraphError(Exception):
    """Base class for all pipeline errors."""


class LexiconError(SeraphError):
    """Category lexicon is malformed (duplicate keys, missing hard-evidence category, empty)."""


class UnknownCategoryError(SeraphError):
    """A score source or configuration references a category with no lexicon entry."""

    def __init__(self, categories):
        self.categories = sorted(categories)
        super().__init__(f"Categories not present in lexicon: {', '.join(self.categories)}")


class EmptyProfileError(SeraphError):
    """The fetch collaborator returned no posts for the requested subject."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"EMPTY_PROFILE: No posts found for user: {username}")


class FetchError(SeraphError):
    """Remote social-media API could not be reached or returned an unusable payload."""


class PersistenceError(SeraphError):
    """Snapshot could not be written to or read from storage."""


class InvalidProfileUrlError(SeraphError):
    """No username could be extracted from the requested profile URL."""

    def __init__(self, profile_url: str):
        self.profile_url = profile_url
        super().__init__(f"No username in profile URL: {profile_url!r}")
