from __future__ import annotations

import queue
import threading
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised by :meth:`JobChannel.receive` once the channel is closed and drained."""


class JobChannel(Generic[T]):
    """Hand-off point between one producer and many consumers.

    Holds at most one pending job, so ``send`` blocks until a consumer has
    taken the previous one. Each job reaches exactly one consumer. Closing
    is the only termination signal: consumers drain what was sent, then see
    the channel as closed.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize=1)
        self._close_lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, job: T) -> None:
        if self._closed:
            raise RuntimeError("send on closed channel")
        self._queue.put(job)

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                raise RuntimeError("close of closed channel")
            self._closed = True
        self._queue.put(_CLOSED)

    def receive(self) -> T:
        item = self._queue.get()
        if item is _CLOSED:
            # leave the marker for the next consumer
            self._queue.put(_CLOSED)
            raise ChannelClosed()
        return item

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return
