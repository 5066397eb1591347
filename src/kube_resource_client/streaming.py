"""Consumption loop shared by watch, logs, exec and attach.

The transport hands over a stream: an iterable of chunks over one long-lived
connection that can be closed from the client side. :class:`StreamConsumer`
decodes each chunk, passes it to the caller's handler and stops as soon as
the handler returns something other than ``None``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, Protocol, runtime_checkable

import structlog

from kube_resource_client.exceptions import StreamError

logger = structlog.get_logger()

Decoder = Callable[[Any], tuple[Any, ...]]
StreamHandler = Callable[..., Any]


@runtime_checkable
class Stream(Protocol):
    """A closable sequence of chunks delivered by the transport."""

    def __iter__(self) -> Iterator[Any]: ...

    def close(self) -> None: ...


def _as_arguments(chunk: Any) -> tuple[Any, ...]:
    return (chunk,)


class StreamConsumer:
    """Drive a stream until the handler or the remote side ends it.

    Handler contract:
        - returning ``None`` asks for the next chunk;
        - returning any other value stops consumption, closes the connection
          and becomes the return value of :meth:`consume`;
        - raising aborts the stream with a :class:`StreamError`.

    Example:
        >>> def handler(event_type, job):
        ...     if event_type == "DELETED":
        ...         return True
        >>> StreamConsumer(stream, decode).consume(handler)  # doctest: +SKIP
    """

    def __init__(self, stream: Stream, decode: Decoder | None = None) -> None:
        self._stream = stream
        self._decode = decode or _as_arguments
        self.received = 0

    def consume(self, handler: StreamHandler | None = None) -> Any:
        """Run the loop.

        Args:
            handler: Called with the decoded arguments of every chunk. When
                omitted, every decoded chunk is collected and returned as a
                list once the remote side closes the stream.

        Returns:
            The handler's stop value, ``None`` if the remote side closed the
            stream first, or the collected chunks when no handler was given.

        Raises:
            StreamError: If the handler or the transport fails mid-stream.
        """
        collected: list[Any] = []
        try:
            for arguments in self._decoded():
                self.received += 1
                if handler is None:
                    collected.append(arguments[0] if len(arguments) == 1 else arguments)
                    continue

                try:
                    result = handler(*arguments)
                except Exception as e:
                    raise StreamError(
                        message=f"Stream handler failed: {e}",
                        original_error=e,
                    ) from e

                if result is not None:
                    logger.debug("stream_stopped_by_handler", received=self.received)
                    return result
        finally:
            self._stream.close()

        logger.debug("stream_closed_by_remote", received=self.received)
        return collected if handler is None else None

    def _decoded(self) -> Iterator[tuple[Any, ...]]:
        chunks = iter(self._stream)
        while True:
            try:
                chunk = next(chunks)
            except StopIteration:
                return
            except StreamError:
                raise
            except Exception as e:
                raise StreamError(message=f"Stream failed: {e}", original_error=e) from e
            yield self._decode(chunk)
