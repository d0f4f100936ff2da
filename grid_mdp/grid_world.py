# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import math
import os
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .domain_object import Action, ActionKind, Direction, Position, Reward, Transition

OPEN = 0
WALL = 1


# 统一拿到命名 logger（与 LoggerManager 内一致）
def _get_logger():
    return logging.getLogger("GridWorldLogger")


class WorldLoadError(ValueError):
    """世界描述文件缺失或格式错误。"""


class GridWorld:
    """
    矩形网格世界（MDP）。

    每个格子是以下之一：
      - open：普通格
      - wall：墙，不可进入
      - exit：带标量奖励的终止格，只能执行 Exit

    约定：
      - 坐标 (x, y)，y 轴向下；格子下标 index = y * width + x（行优先）。
      - 撞墙或撞边界时，保持原地。
      - noise 是“按意图方向移动”的概率，不是打滑概率：
            P(意图方向) = noise，两侧正交方向各 (1 - noise) / 2
    """

    def __init__(self, width: int, height: int):
        if width < 0 or height < 0:
            raise ValueError(f"非法尺寸 {width}x{height}")
        self.width, self.height = width, height
        self.board = np.full(width * height, OPEN, dtype=np.int8)
        self.exits: List[Optional[Reward]] = [None] * (width * height)

    # -----------------------------
    # 构建（仅在 setup 阶段调用）
    # -----------------------------
    def add_wall(self, x: int, y: int) -> None:
        if not self._in_bounds(x, y):
            _get_logger().debug("wall (%s, %s) out of bounds, ignored", x, y)
            return
        self.board[y * self.width + x] = WALL

    def add_exit(self, x: int, y: int, reward: Reward) -> None:
        if not self._in_bounds(x, y):
            _get_logger().debug("exit (%s, %s) out of bounds, ignored", x, y)
            return
        self.exits[y * self.width + x] = float(reward)

    # -----------------------------
    # 查询
    # -----------------------------
    @property
    def area(self) -> int:
        return self.width * self.height

    def index(self, state: Position) -> int:
        return state.y * self.width + state.x

    def position(self, index: int) -> Position:
        return Position(index % self.width, index // self.width)

    def positions(self) -> Iterator[Position]:
        """行优先遍历全部格子，顺序与 index 一致。"""
        for y in range(self.height):
            for x in range(self.width):
                yield Position(x, y)

    def valid_position(self, state: Position) -> bool:
        if not self._in_bounds(state.x, state.y):
            return False
        return self.board[self.index(state)] == OPEN

    def is_wall(self, state: Position) -> bool:
        return self._in_bounds(state.x, state.y) and self.board[self.index(state)] == WALL

    def can_exit(self, state: Position) -> bool:
        if not self._in_bounds(state.x, state.y):
            return False
        return self.exits[self.index(state)] is not None

    # -----------------------------
    # 动力学：移动 / 转移 / 奖励
    # -----------------------------
    def move_to(self, state: Position, direction: Direction) -> Position:
        dx, dy = direction.delta
        target = Position(state.x + dx, state.y + dy)
        if self.valid_position(target):
            return target
        # 撞墙或出界
        return state

    @staticmethod
    def get_moves(direction: Direction) -> Tuple[Direction, Direction, Direction]:
        """意图方向 + 两个正交方向；反方向永远不会出现。"""
        if direction in (Direction.UP, Direction.DOWN):
            return direction, Direction.LEFT, Direction.RIGHT
        return direction, Direction.UP, Direction.DOWN

    def transition(self, state: Position, action: Action, noise: float) -> Optional[List[Transition]]:
        """
        返回 [(prob, 实际动作)]；无效查询返回 None（调用方按 0 贡献处理）。

        noise 为意图方向的概率：
            Move(d) -> [(noise, d), ((1-noise)/2, o1), ((1-noise)/2, o2)]
        """
        if action.kind is ActionKind.EXIT:
            if self.can_exit(state):
                return [Transition(1.0, Action.exit())]
            return None

        if action.kind is ActionKind.MOVE:
            moves = self.get_moves(action.direction)
            remainder = (1.0 - noise) / (len(moves) - 1)
            result = [Transition(noise, Action.move(moves[0]))]
            result.extend(Transition(remainder, Action.move(d)) for d in moves[1:])
            return result

        return None

    def reward(self, state: Position, action: Action) -> Reward:
        if action.kind is ActionKind.EXIT and self.can_exit(state):
            return self.exits[self.index(state)]
        return 0.0

    # -----------------------------
    # 世界描述文件（读 / 写）
    # -----------------------------
    @classmethod
    def load(cls, path: str) -> "GridWorld":
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise WorldLoadError(f"无法读取世界文件 {path}: {e}") from e
        return cls.from_text(text)

    @classmethod
    def from_text(cls, text: str) -> "GridWorld":
        """
        行格式：
            # 注释
            Dimension <w>,<h>
            Wall <x>,<y>
            Exit <x>,<y>,<reward>
        其他行忽略。墙与出口在确定尺寸之后再落到网格上。
        """
        dims: Optional[Tuple[int, int]] = None
        walls: List[Tuple[int, int]] = []
        exits: List[Tuple[int, int, float]] = []

        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if line.startswith("#"):
                continue

            if line.startswith("Dimension"):
                fields = _fields(line, lineno)
                dims = (_parse_int(fields, 0, "width", lineno), _parse_int(fields, 1, "height", lineno))
            elif line.startswith("Wall"):
                fields = _fields(line, lineno)
                walls.append((_parse_int(fields, 0, "x", lineno), _parse_int(fields, 1, "y", lineno)))
            elif line.startswith("Exit"):
                fields = _fields(line, lineno)
                exits.append((
                    _parse_int(fields, 0, "x", lineno),
                    _parse_int(fields, 1, "y", lineno),
                    _parse_reward(fields, 2, lineno),
                ))

        if dims is None:
            raise WorldLoadError("缺少 Dimension 行")

        world = cls(*dims)
        for x, y in walls:
            world.add_wall(x, y)
        for x, y, reward in exits:
            world.add_exit(x, y, reward)
        return world

    def to_text(self) -> str:
        lines = ["# Grid World", f"Dimension {self.width},{self.height}"]
        for state in self.positions():
            if self.is_wall(state):
                lines.append(f"Wall {state.x},{state.y}")
        for state in self.positions():
            reward = self.exits[self.index(state)]
            if reward is not None:
                lines.append(f"Exit {state.x},{state.y},{reward!r}")
        return "\n".join(lines) + "\n"

    def save(self, path: str) -> None:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_text())

    # ---------- 工具 ----------
    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def __repr__(self) -> str:
        n_walls = int(np.count_nonzero(self.board == WALL))
        n_exits = sum(r is not None for r in self.exits)
        return f"GridWorld({self.width}x{self.height}, walls={n_walls}, exits={n_exits})"


# -----------------------------
# 默认世界
# -----------------------------
def default_world() -> GridWorld:
    """4x3；墙 (1,1)；出口 (3,0)=+1，(3,1)=-1。"""
    world = GridWorld(4, 3)
    world.add_wall(1, 1)
    world.add_exit(3, 0, 1.0)
    world.add_exit(3, 1, -1.0)
    return world


def load_world_or_default(path: Optional[str]) -> GridWorld:
    """读取失败不致命：记录 warning 后回退到默认世界。"""
    if not path:
        return default_world()
    try:
        return GridWorld.load(path)
    except WorldLoadError as e:
        _get_logger().warning("load world failed (%s), fallback to default world", e)
        return default_world()


# ---------- 解析辅助 ----------
def _fields(line: str, lineno: int) -> List[str]:
    tokens = line.split()
    if len(tokens) < 2:
        raise WorldLoadError(f"第 {lineno} 行：期望至少两个字段")
    return tokens[1].split(",")


def _parse_int(fields: List[str], pos: int, name: str, lineno: int) -> int:
    if pos >= len(fields):
        raise WorldLoadError(f"第 {lineno} 行：缺少 {name}")
    text = fields[pos]
    if not (text.isascii() and text.isdigit()):
        raise WorldLoadError(f"第 {lineno} 行：{name}={text!r} 不是非负整数")
    return int(text)


def _parse_reward(fields: List[str], pos: int, lineno: int) -> float:
    if pos >= len(fields):
        raise WorldLoadError(f"第 {lineno} 行：缺少 reward")
    try:
        value = float(fields[pos])
    except ValueError as e:
        raise WorldLoadError(f"第 {lineno} 行：reward={fields[pos]!r} 不是浮点数") from e
    if not math.isfinite(value):
        raise WorldLoadError(f"第 {lineno} 行：reward 必须为有限值")
    return value
