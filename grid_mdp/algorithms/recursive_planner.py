# -*- coding: utf-8 -*-
# 路径：grid_mdp/algorithms/recursive_planner.py
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Tuple
import numpy as np

from grid_mdp.grid_world import GridWorld
from grid_mdp.domain_object import Action, Analysis, Direction, Position
from grid_mdp.utils.mdp_ops import N_DIRECTIONS, value_of, generate_policy
from grid_mdp.utils.logger_manager import LOGGER_NAME

Key = Tuple[Position, int]  # (state, depth)


class RecursivePlanner:
    """
    自顶向下的有限深度价值计算：
        V_0(s) = 0
        V_k(s) = 0                                  （无效格）
               = R(s, Exit)                         （exit 格，k >= 1）
               = max_a Σ p * (r + γ V_{k-1}(s'))    （其他）
    (state, depth) 做备忘，每个键只计算一次；用显式栈代替递归，深度不受递归上限约束。
    V_k 与自底向上做 k 轮 T* 备份的结果一致。
    """
    def __init__(self, world: GridWorld, discount: float = 0.9, noise: float = 0.8) -> None:
        self.world = world
        self.gamma = float(discount)
        self.noise = float(noise)
        self.memo: Dict[Key, float] = {}
        self.evaluations = 0
        self._logger = logging.getLogger(LOGGER_NAME)

    def value(self, state: Position, depth: int) -> float:
        root: Key = (state, depth)
        if root in self.memo:
            return self.memo[root]

        stack: List[Key] = [root]
        while stack:
            key = stack[-1]
            if key in self.memo:
                stack.pop()
                continue

            s, d = key
            base = self._base_value(s, d)
            if base is not None:
                self._store(key, base)
                stack.pop()
                continue

            # 先把尚未算出的后继 (s', d-1) 压栈，全部就绪后再回到当前键
            pending = [(n, d - 1) for n in self._successors(s) if (n, d - 1) not in self.memo]
            if pending:
                stack.extend(pending)
                continue

            self._store(key, float(self._q_from_memo(s, d).max()))
            stack.pop()

        return self.memo[root]

    def q_values(self, state: Position, depth: int) -> np.ndarray:
        """深度 depth 处 4 个方向的 Q（使用 depth-1 的价值）。"""
        if depth <= 0 or not self.world.valid_position(state) or self.world.can_exit(state):
            return np.zeros(N_DIRECTIONS, dtype=float)
        for n in self._successors(state):
            self.value(n, depth - 1)
        return self._q_from_memo(state, depth)

    def values(self, depth: int) -> np.ndarray:
        return np.array([self.value(s, depth) for s in self.world.positions()], dtype=float)

    def analysis(self, depth: int) -> Analysis:
        V = self.values(depth)
        Q = np.array([self.q_values(s, depth) for s in self.world.positions()], dtype=float)
        Q = Q.reshape(self.world.area, N_DIRECTIONS)
        self._logger.info(
            "recursive planner: depth=%s, memo size=%s, evaluations=%s", depth, len(self.memo), self.evaluations
        )
        return Analysis.build(generate_policy(self.world, Q), V, Q, iterations=depth, converged=False)

    def clear(self) -> None:
        self.memo.clear()
        self.evaluations = 0

    # ---------- 内部 ----------
    def _base_value(self, state: Position, depth: int) -> Optional[float]:
        if depth <= 0 or not self.world.valid_position(state):
            return 0.0
        if self.world.can_exit(state):
            return self.world.reward(state, Action.exit())
        return None

    def _successors(self, state: Position) -> List[Position]:
        seen: List[Position] = []
        for d in Direction.all():
            n = self.world.move_to(state, d)
            if n not in seen:
                seen.append(n)
        return seen

    def _q_from_memo(self, state: Position, depth: int) -> np.ndarray:
        prev = {self.world.index(n): self.memo[(n, depth - 1)] for n in self._successors(state)}
        return np.array(
            [value_of(self.world, state, Action.move(d), self.gamma, self.noise, prev) for d in Direction.all()],
            dtype=float,
        )

    def _store(self, key: Key, v: float) -> None:
        self.memo[key] = v
        self.evaluations += 1
