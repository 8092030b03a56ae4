"""Shared fixtures for the diceroll test suite.

rolls
    Factory for scripted random sources: ``rolls(2, 6, 6)`` returns a source
    that hands out 2, then 6, then 6, regardless of the number of faces asked
    for. Running out of values raises ``IndexError``, so a test that rolls
    more dice than it scripted fails loudly.

highest
    A random source that always rolls the highest face.
"""

from __future__ import annotations

import typing

import pytest


@pytest.fixture
def rolls() -> typing.Callable[..., typing.Callable[[int], int]]:
    def script(*values: int) -> typing.Callable[[int], int]:
        queue = list(values)

        def source(faces: int) -> int:
            return queue.pop(0)

        return source

    return script


@pytest.fixture
def highest() -> typing.Callable[[int], int]:
    return lambda faces: faces
