from enum import Enum
from typing import List, Tuple


class Direction(Enum):
    # 取值即 Q 表中的列下标，顺序 {Up, Right, Down, Left} 全局一致
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    @staticmethod
    def all() -> List["Direction"]:
        return [Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT]

    @property
    def delta(self) -> Tuple[int, int]:
        """(dx, dy)；y 轴向下增长。"""
        return _DELTAS[self]

    @property
    def opposite(self) -> "Direction":
        return Direction((self.value + 2) % 4)


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}
