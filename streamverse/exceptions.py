"""
Exception types for the aggregation pipeline and the playback fallback protocol.
"""


class StreamVerseError(Exception):
    """Base exception for all StreamVerse errors."""

    def __init__(self, message: str = "A StreamVerse error occurred"):
        self.message = message
        super().__init__(self.message)


class SourceFetchError(StreamVerseError):
    """Raised when a playlist source could not be fetched after all retries."""

    def __init__(self, source_name: str, message: str, attempts: int = 1):
        self.source_name = source_name
        self.attempts = attempts
        super().__init__(message)


class CatalogUnavailableError(StreamVerseError):
    """Raised at startup when no snapshot is loadable and no source succeeded."""


class PlaybackError(StreamVerseError):
    """Terminal state of a playback session, reported to the user."""


class NoAlternativesLeft(PlaybackError):
    """Every stream of the channel failed and auto-switch is disabled."""

    def __init__(self, channel_name: str):
        self.channel_name = channel_name
        super().__init__(f"All sources for {channel_name} are unavailable.")


class NoChannelsLeft(PlaybackError):
    """Auto-switch ran out of channels to try."""

    def __init__(self):
        super().__init__("No more channels available.")
