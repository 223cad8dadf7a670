"""
Exception hierarchy for recallkit.

Every error raised by the library derives from RecallkitError. Where a
builtin exception describes the same failure (bad value, missing key) the
error inherits from it too, so generic handlers keep working.
"""


class RecallkitError(Exception):
    """Base class for all recallkit errors."""


class InvalidQuality(RecallkitError, ValueError):
    """A recall grade outside the accepted range was supplied."""

    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(f"Quality must be an integer in [0, 4], got {quality!r}")


class InvalidCardError(RecallkitError, ValueError):
    """Card input is malformed or a Card invariant would be violated."""


class NotFoundError(RecallkitError, KeyError):
    """A card id is unknown to the store."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(card_id)

    def __str__(self) -> str:
        return f"Card not found: {self.card_id}"


class SessionStateError(RecallkitError):
    """An operation is not valid in the review session's current state."""


class EmptySessionError(SessionStateError):
    """A review session was started with no due cards."""


class SessionCompletedError(SessionStateError):
    """The review session has already completed or been ended."""


class DeckFormatError(RecallkitError):
    """A serialized deck or card record could not be read."""
