from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .direction import Direction


class ActionKind(Enum):
    NONE = 0   # 墙/无效格：不参与 Bellman 备份
    MOVE = 1
    EXIT = 2   # 仅 exit 格合法


@dataclass(frozen=True)
class Action:
    """
    带标签的动作：None / Move(direction) / Exit。
    只有 MOVE 携带 direction。
    """
    kind: ActionKind
    direction: Optional[Direction] = None

    @staticmethod
    def none() -> "Action":
        return Action(ActionKind.NONE)

    @staticmethod
    def exit() -> "Action":
        return Action(ActionKind.EXIT)

    @staticmethod
    def move(direction: Direction) -> "Action":
        return Action(ActionKind.MOVE, direction)

    @property
    def is_move(self) -> bool:
        return self.kind is ActionKind.MOVE

    @property
    def is_exit(self) -> bool:
        return self.kind is ActionKind.EXIT

    @property
    def is_none(self) -> bool:
        return self.kind is ActionKind.NONE

    def __repr__(self) -> str:
        if self.is_move:
            return f"Move({self.direction.name.capitalize()})"
        return self.kind.name.capitalize()
