"""
Load tracking: discard results of loads that were overtaken.

Each load for a user takes a ticket stamped with the user's current
generation. A mutation (or a newer load that asks for it) bumps the
generation, so a slower load that started earlier can tell its data is
stale and must not be written back to the shared cache.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LoadTicket:
    user_id: str
    generation: int
    tracker: "LoadTracker"

    @property
    def is_current(self) -> bool:
        return self.tracker.current_generation(self.user_id) == self.generation


class LoadTracker:
    def __init__(self):
        self._generations: dict[str, int] = {}

    def current_generation(self, user_id: str) -> int:
        return self._generations.get(user_id, 0)

    def begin(self, user_id: str, supersede: bool = False) -> LoadTicket:
        """Start a load. With supersede=True, loads already in flight become stale."""
        if supersede:
            self.supersede(user_id)
        return LoadTicket(user_id, self.current_generation(user_id), self)

    def supersede(self, user_id: str) -> int:
        generation = self.current_generation(user_id) + 1
        self._generations[user_id] = generation
        return generation
