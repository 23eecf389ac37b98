"""
Playback fallback controller.

Drives the client side of playback: plays a channel's primary stream, walks
its alternatives when a stream fails or does not load in time, and, with
auto-switch on, moves on to the next channel once every stream is exhausted.

Every stream load is tagged with an Attempt. The player reports back through
on_playback_outcome(); outcomes for anything but the live attempt (a closed
session, a superseded channel, a stream already given up on) are ignored, so
late callbacks can never trigger a switch.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from streamverse.exceptions import NoAlternativesLeft, NoChannelsLeft, PlaybackError
from streamverse.models.channel import Channel, ChannelRecord

logger = logging.getLogger(__name__)

DEFAULT_LOAD_TIMEOUT = 10.0


class PlaybackOutcome(str, Enum):
    LOADED = "loaded"
    FAILED = "failed"
    TIMEOUT = "timeout"


class PlayerState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    ERROR = "error"


@dataclass(frozen=True)
class Attempt:
    """Identifies one stream load within one playback session."""
    session: int
    seq: int


class Player(Protocol):
    def load(self, stream: ChannelRecord, attempt: Attempt) -> None: ...

    def stop(self) -> None: ...


class AlternativesSource(Protocol):
    async def fetch_alternatives(self, channel_id: int) -> list[ChannelRecord]: ...


class FallbackController:
    """Retry-then-skip playback state machine for one player."""

    def __init__(
        self,
        channels: list[Channel],
        alternatives_source: AlternativesSource,
        player: Player,
        auto_switch: bool = True,
        load_timeout: float = DEFAULT_LOAD_TIMEOUT,
        on_error: Optional[Callable[[PlaybackError], None]] = None,
        on_message: Optional[Callable[[str], None]] = None,
    ):
        self.channels = channels
        self.alternatives_source = alternatives_source
        self.player = player
        self.auto_switch = auto_switch
        self.load_timeout = load_timeout
        self.on_error = on_error
        self.on_message = on_message

        self.state = PlayerState.IDLE
        self.channel_index = -1
        self.alternatives: list[ChannelRecord] = []
        self.alt_index = 0
        self.last_error: Optional[PlaybackError] = None
        self.history: list[tuple[int, str]] = []  # (channel index, stream url) per load

        self._session = 0
        self._seq = 0
        self._closed = True
        self._attempt: Optional[Attempt] = None
        self._attempt_done = True
        self._chain_start = -1
        self._timeout_task: Optional[asyncio.Task] = None

    @property
    def current_channel(self) -> Optional[Channel]:
        if 0 <= self.channel_index < len(self.channels):
            return self.channels[self.channel_index]
        return None

    @property
    def current_attempt(self) -> Optional[Attempt]:
        return self._attempt

    async def play(self, index: int):
        """Start playing the channel at `index`, ending any previous session."""
        await self._play(index, chain_start=index)

    def close(self):
        """User closed the player: stop and ignore every pending callback."""
        self._closed = True
        self._session += 1
        self._attempt = None
        self._cancel_timeout()
        self.player.stop()

        self.state = PlayerState.IDLE
        self.channel_index = -1
        self.alternatives = []
        self.alt_index = 0

    async def on_playback_outcome(self, attempt: Attempt, outcome: PlaybackOutcome):
        """Handle a player event or load timeout for `attempt`."""
        if self._closed or attempt != self._attempt or self._attempt_done:
            return

        if outcome == PlaybackOutcome.LOADED:
            # Data arrived; an error event may still end this attempt later
            self._cancel_timeout()
            return

        self._attempt_done = True
        self._cancel_timeout()
        logger.info(f"Stream {outcome.value} on channel {self.channel_index} (attempt {attempt.seq})")
        await self._advance()

    async def _play(self, index: int, chain_start: int):
        if not self.channels:
            self._fail(NoChannelsLeft())
            return

        self._session += 1
        session = self._session
        self._closed = False
        self._attempt = None
        self._cancel_timeout()

        self.state = PlayerState.PLAYING
        self.channel_index = index % len(self.channels)
        self._chain_start = chain_start % len(self.channels)
        self.alternatives = []
        self.alt_index = 0
        self.last_error = None

        channel = self.channels[self.channel_index]
        alternatives = await self._fetch_alternatives(channel.id)
        if session != self._session:
            # Closed or replaced while alternatives were loading
            return

        self.alternatives = alternatives
        self._load(channel)

    async def _fetch_alternatives(self, channel_id: int) -> list[ChannelRecord]:
        try:
            return list(await self.alternatives_source.fetch_alternatives(channel_id))
        except Exception as e:
            logger.error(f"Error loading alternatives for channel {channel_id}: {e}")
            return []

    def _load(self, stream: ChannelRecord):
        self._seq += 1
        attempt = Attempt(self._session, self._seq)
        self._attempt = attempt
        self._attempt_done = False
        self.history.append((self.channel_index, stream.stream_url))

        self.player.load(stream, attempt)
        self._timeout_task = asyncio.create_task(self._watch_load_timeout(attempt))
        self._timeout_task.add_done_callback(self._log_timeout_error)

    async def _watch_load_timeout(self, attempt: Attempt):
        await asyncio.sleep(self.load_timeout)
        await self.on_playback_outcome(attempt, PlaybackOutcome.TIMEOUT)

    def _log_timeout_error(self, task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Error handling load timeout: {error!r}", exc_info=error)

    def _cancel_timeout(self):
        task = self._timeout_task
        self._timeout_task = None
        # The timeout task may be the one driving this transition
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _advance(self):
        if self.alt_index < len(self.alternatives):
            alternative = self.alternatives[self.alt_index]
            self.alt_index += 1
            self._message(
                f"Trying alternative source {self.alt_index}/{len(self.alternatives)}: "
                f"{alternative.source_name}"
            )
            self._load(alternative)
            return

        if not self.auto_switch:
            self._fail(NoAlternativesLeft(self.current_channel.name))
            return

        next_index = (self.channel_index + 1) % len(self.channels)
        if next_index == self._chain_start:
            self._fail(NoChannelsLeft())
            return

        self._message("All sources failed. Trying next channel...")
        await self._play(next_index, chain_start=self._chain_start)

    def _fail(self, error: PlaybackError):
        self._attempt_done = True
        self._cancel_timeout()
        self.player.stop()
        self.state = PlayerState.ERROR
        self.last_error = error
        logger.warning(f"Playback stopped: {error.message}")
        if self.on_error is not None:
            self.on_error(error)

    def _message(self, text: str):
        logger.info(text)
        if self.on_message is not None:
            self.on_message(text)
