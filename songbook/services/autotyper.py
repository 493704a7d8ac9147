"""Typing animation for the search field placeholder."""

from songbook.core.config import constants


class Autotyper:
    """Reveals a target string one character per tick.

    Each new target bumps `generation`; ticks scheduled for an older
    generation are ignored so a restarted animation never runs twice as fast.
    """

    def __init__(self, target: str = constants.DEFAULT_PLACEHOLDER) -> None:
        self.target = target
        self.revealed = 0
        self.generation = 0

    @property
    def display(self) -> str:
        return self.target[: self.revealed]

    @property
    def done(self) -> bool:
        return self.revealed >= len(self.target)

    def restart(self, target: str) -> int:
        """Start typing a new target from scratch.

        Returns:
            The generation the next tick must carry
        """
        self.target = target
        self.revealed = 0
        self.generation += 1
        return self.generation

    def tick(self, generation: int) -> bool:
        """Reveal one more character.

        Returns:
            True if another tick should be scheduled
        """
        if generation != self.generation or self.done:
            return False
        self.revealed += 1
        return not self.done
