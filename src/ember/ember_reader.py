"""
Buffered character source for the EMBER lexer.

This module provides `CharacterStream`, a peekable stream of Unicode characters
over an arbitrary input. The stream keeps a bounded lookahead buffer: at most
`capacity` characters are ever held ahead of the consuming cursor, so input is
pulled incrementally instead of being materialized up front.

Accepted inputs:
    - `str`: wrapped in an in-memory text stream.
    - `bytes`, `bytearray`: wrapped in an in-memory binary stream.
    - Binary readables (`read()` returns `bytes`): decoded as strict UTF-8.
    - Text readables (`read()` returns `str`): used as-is.

Raises:
    DecodingError: As soon as the input contains invalid UTF-8.
    ValueError: For a non-positive capacity or a lookahead wider than it.

Example:
    >>> stream = CharacterStream("let a = 1", capacity=4)
    >>> stream.peek_n(3)
    'let'
    >>> stream.next()
    'l'
"""

from __future__ import annotations

import codecs
import io
import logging
from collections import deque
from collections.abc import Iterator
from typing import IO, Any, Union

from ember.ember_constants import DEFAULT_CAPACITY
from ember.ember_errors import DecodingError

logger = logging.getLogger(__name__)

Source = Union[str, bytes, bytearray, IO[str], IO[bytes]]


class CharacterStream:
    """
    A peekable stream of characters backed by a fixed-capacity lookahead buffer.

    Attributes:
        capacity (int): Maximum number of characters that can be peeked ahead.
    """

    def __init__(self, source: Source, capacity: int = DEFAULT_CAPACITY) -> None:
        """
        Initializes the stream and primes the buffer with up to `capacity` characters.

        Args:
            source (Source): Text, bytes, or a readable producing either.
            capacity (int, optional): Lookahead capacity. Defaults to DEFAULT_CAPACITY.

        Raises:
            ValueError: If `capacity` is less than 1.
            DecodingError: If the first characters are not valid UTF-8.
        """
        if capacity < 1:
            raise ValueError(f"Buffer capacity must be at least 1, got {capacity}")
        self.capacity = capacity

        if isinstance(source, str):
            source = io.StringIO(source)
        elif isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        self._input: Any = source

        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
        self._pending = ""
        self._exhausted = False
        self._buffer: deque[str] = deque()
        self._fill()

    def _read_chunk(self) -> str:
        """Pulls the next run of decoded characters from the input."""
        raw = self._input.read(self.capacity)
        if isinstance(raw, str):
            return raw
        try:
            return self._decoder.decode(raw, final=not raw)
        except UnicodeDecodeError as e:
            raise DecodingError(f"Malformed UTF-8 input: {e.reason}") from e

    def _read_char(self) -> str | None:
        """Returns one character from the input, or None once it is exhausted."""
        while not self._pending:
            if self._exhausted:
                return None
            try:
                chunk = self._read_chunk()
            except UnicodeDecodeError as e:
                # text readables decode on their own and raise here
                raise DecodingError(f"Malformed UTF-8 input: {e.reason}") from e
            if chunk == "" and self._input_done():
                self._exhausted = True
                return None
            self._pending = chunk
        char, self._pending = self._pending[0], self._pending[1:]
        return char

    def _input_done(self) -> bool:
        # a binary decoder may hold a partial sequence across an empty read
        return self._decoder.getstate()[0] == b""

    def _fill(self, wanted: int | None = None) -> None:
        """Tops the buffer up to `wanted` characters (capacity by default)."""
        target = self.capacity if wanted is None else wanted
        before = len(self._buffer)
        while len(self._buffer) < target:
            char = self._read_char()
            if char is None:
                break
            self._buffer.append(char)
        if len(self._buffer) != before:
            logger.debug(
                "Buffer refilled with %d character(s)", len(self._buffer) - before
            )

    def peek_n(self, n: int) -> str:
        """
        Returns up to the next `n` characters without consuming any of them.

        Args:
            n (int): Number of characters to look ahead, at most `capacity`.

        Returns:
            str: The upcoming characters; shorter than `n` near the end of input.

        Raises:
            ValueError: If `n` exceeds the buffer capacity.
        """
        if n > self.capacity:
            raise ValueError(
                f"Cannot peek {n} characters with a buffer capacity of {self.capacity}"
            )
        if len(self._buffer) < n:
            self._fill(n)
        return "".join(self._buffer[i] for i in range(min(n, len(self._buffer))))

    def peek(self) -> str | None:
        """Returns the next character without consuming it, or None at end of input."""
        ahead = self.peek_n(1)
        return ahead or None

    def next(self) -> str | None:
        """
        Consumes and returns the next character.

        Returns:
            str | None: The next character, or None once input and buffer are exhausted.
        """
        if not self._buffer:
            self._fill()
            if not self._buffer:
                return None
        return self._buffer.popleft()

    def end_of_file(self) -> bool:
        """Checks whether every character has been consumed."""
        return self.peek() is None

    def __iter__(self) -> Iterator[str]:
        while (char := self.next()) is not None:
            yield char


__all__ = ["CharacterStream", "Source"]
