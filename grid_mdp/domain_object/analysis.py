# -*- coding: utf-8 -*-
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple
import numpy as np

from .action import Action


@dataclass(frozen=True)
class Analysis:
    """
    求解结果快照：最终策略、V、Q，以及 V 的 min/max（供下游做颜色映射）。
    构造后只读：policy 存为 tuple，数组关闭写权限。
    """
    policy: Tuple[Action, ...]
    values: np.ndarray
    q_values: np.ndarray
    min_value: float
    max_value: float
    iterations: int = 0
    converged: bool = True

    @classmethod
    def build(
        cls,
        policy: Sequence[Action],
        values: np.ndarray,
        q_values: np.ndarray,
        *,
        iterations: int = 0,
        converged: bool = True,
    ) -> "Analysis":
        values = np.array(values, dtype=float)
        q_values = np.array(q_values, dtype=float)
        values.setflags(write=False)
        q_values.setflags(write=False)

        # 空网格时 min/max 记为 0
        min_value = float(values.min()) if values.size else 0.0
        max_value = float(values.max()) if values.size else 0.0
        return cls(
            policy=tuple(policy),
            values=values,
            q_values=q_values,
            min_value=min_value,
            max_value=max_value,
            iterations=iterations,
            converged=converged,
        )
