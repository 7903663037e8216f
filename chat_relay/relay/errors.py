"""Exceptions raised by the streaming relay."""


class RelayError(Exception):
    """Base class for relay failures."""

    pass


class FrameDecodeError(RelayError):
    """Raised when an inbound frame payload is not a valid chat request."""

    pass


class TransportClosedError(RelayError):
    """Raised when the peer is gone and a frame can no longer be sent."""

    pass


class AccumulatorClosedError(RelayError):
    """Raised when a finished token accumulator is written to again."""

    pass


class CompletionError(RelayError):
    """Raised when a turn's completion cannot be produced.

    Fatal to the turn, never to the connection.
    """

    pass


class UpstreamError(CompletionError):
    """Raised when the completion provider fails mid-request or mid-stream."""

    pass


class MergeError(CompletionError):
    """Raised when two deltas of one stream cannot be merged."""

    pass


class EmptyCompletionError(CompletionError):
    """Raised when a completion stream ends without producing any delta."""

    pass
