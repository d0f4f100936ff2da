from dataclasses import dataclass

from .action import Action

Reward = float


@dataclass(frozen=True)
class Transition:
    prob: float
    action: Action
