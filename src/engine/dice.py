"""
Farkle Party - Randomness Sources

Die faces and the starting turn order are drawn from an injectable source.
Production code uses ``SecureDice``; tests feed a ``ScriptedDice``.
"""

import secrets
from typing import Iterable, Protocol, Sequence

from src.engine.base import DIE_FACES


class DiceSource(Protocol):
    """Anything that can produce die faces and shuffle ids."""

    def roll_face(self) -> int:
        """Return a uniform integer in [1, 6]."""
        ...

    def shuffle(self, ids: Sequence[str]) -> list[str]:
        """Return a new list holding ``ids`` in random order."""
        ...


class SecureDice:
    """
    Cryptographically strong dice.

    ``secrets.randbelow`` rejection-samples from the OS CSPRNG, so faces
    are unbiased.
    """

    def roll_face(self) -> int:
        return secrets.randbelow(DIE_FACES) + 1

    def shuffle(self, ids: Sequence[str]) -> list[str]:
        """Fisher-Yates shuffle on the same source."""
        result = list(ids)
        for i in range(len(result) - 1, 0, -1):
            j = secrets.randbelow(i + 1)
            result[i], result[j] = result[j], result[i]
        return result


class ScriptedDice:
    """
    Deterministic dice that replay a fixed sequence of faces.

    Args:
        faces: Faces returned by successive ``roll_face`` calls
        order: Turn order returned by ``shuffle`` (input order if None)
    """

    def __init__(self, faces: Iterable[int] = (), order: Sequence[str] | None = None) -> None:
        self._faces = list(faces)
        self._position = 0
        self._order = list(order) if order is not None else None
        for face in self._faces:
            if not (1 <= face <= DIE_FACES):
                raise ValueError(f"Scripted face {face} out of range 1-{DIE_FACES}.")

    @property
    def remaining(self) -> int:
        """Number of scripted faces not yet drawn."""
        return len(self._faces) - self._position

    def roll_face(self) -> int:
        if self._position >= len(self._faces):
            raise RuntimeError("Scripted dice exhausted.")
        face = self._faces[self._position]
        self._position += 1
        return face

    def shuffle(self, ids: Sequence[str]) -> list[str]:
        if self._order is None:
            return list(ids)
        if sorted(self._order) != sorted(ids):
            raise ValueError("Scripted order does not match the ids being shuffled.")
        return list(self._order)


default_source = SecureDice()


def roll_faces(count: int, source: DiceSource | None = None) -> tuple[int, ...]:
    """Draw ``count`` faces from ``source`` (the secure default if None)."""
    if source is None:
        source = default_source
    return tuple(source.roll_face() for _ in range(count))
