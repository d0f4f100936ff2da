# -*- coding: utf-8 -*-
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
import numpy as np

from grid_mdp.grid_world import GridWorld
from grid_mdp.domain_object import Action, Analysis, Direction
from grid_mdp.utils.mdp_ops import (
    N_DIRECTIONS,
    q_values_of,
    bellman_optimality_update,
    bellman_expectation_update,
    bellman_residual_optimality,
    max_signed_delta,
    generate_policy,
    default_policy,
    policy_equal,
)
from grid_mdp.utils.logger_manager import LoggerManager
from grid_mdp.utils.timing import record_time_decorator


class Algorithm(Enum):
    VALUE_ITERATION = "value"
    POLICY_ITERATION = "policy"


class EvaluationMode(Enum):
    TO_CONVERGENCE = "convergence"   # 一次调用跑到收敛
    SINGLE_STEP = "step"             # 每次调用只做一轮 sweep（动画逐帧）


@dataclass
class PlannerConfig:
    discount: float = 0.9              # γ
    noise: float = 0.8                 # 意图方向的概率（不是打滑概率）
    epsilon: float = 1e-4              # 收敛阈值：|max_s (V'-V)| < epsilon
    max_iter: Optional[int] = 10000    # 单个收敛循环的 sweep 上限；None 表示不设上限
    algorithm: Algorithm = Algorithm.VALUE_ITERATION
    mode: EvaluationMode = EvaluationMode.TO_CONVERGENCE

    def __post_init__(self):
        if not 0.0 <= self.discount <= 1.0:
            raise ValueError(f"discount={self.discount} 应在 [0, 1] 内")
        if not 0.0 <= self.noise <= 1.0:
            raise ValueError(f"noise={self.noise} 应在 [0, 1] 内")
        if self.epsilon <= 0.0:
            raise ValueError(f"epsilon={self.epsilon} 应为正数")
        if self.max_iter is not None and self.max_iter < 1:
            raise ValueError(f"max_iter={self.max_iter} 应 >= 1")


class VPPlanner:
    """
    统一封装 Value Iteration / Policy Iteration，
    两种运行方式：跑到收敛（solve）或逐帧单步（step）。
    """
    def __init__(
        self,
        world: GridWorld,
        cfg: Optional[PlannerConfig] = None,
        log_dir: Optional[str] = None,
        use_tb: bool = False,
    ) -> None:
        self.logger = LoggerManager(log_dir, use_tensorboard=use_tb)
        self.world = world
        self.cfg = cfg or PlannerConfig()
        self.gamma = float(self.cfg.discount)
        self.noise = float(self.cfg.noise)
        self.logger.log(
            f"VPPlanner initialized: {world}, algorithm={self.cfg.algorithm.value}, "
            f"mode={self.cfg.mode.value}, gamma={self.gamma}, noise={self.noise}"
        )

        # 单步模式的运行状态
        self.values: np.ndarray
        self.q_values: np.ndarray
        self.policy: List[Action]
        self.ticks = 0
        self.reset()

    # ---------------------------------------------------------------------
    # 统一入口
    # ---------------------------------------------------------------------
    def solve(self) -> Analysis:
        if self.cfg.mode is EvaluationMode.SINGLE_STEP:
            return self.step()
        if self.cfg.algorithm is Algorithm.POLICY_ITERATION:
            return self.policy_iteration()
        return self.value_iteration()

    # ---------------------------------------------------------------------
    # 算法 1：Value Iteration
    # ---------------------------------------------------------------------
    @record_time_decorator('value iteration')
    def value_iteration(self, V_init: Optional[np.ndarray] = None) -> Analysis:
        V = self._zeros() if V_init is None else np.array(V_init, dtype=float)
        Q = self._zero_q()

        iterations, converged = 0, False
        while not self._cap_reached(iterations):
            iterations += 1
            V_new, Q = bellman_optimality_update(self.world, self.gamma, self.noise, V)   # v_{k+1} = max_a q_k
            delta = max_signed_delta(V_new, V)
            V = V_new
            self.logger.add_scalar("value_iteration/delta", delta, iterations)

            # 第一轮主要是注入奖励，不能据此判定收敛
            if abs(delta) < self.cfg.epsilon and iterations > 1:
                converged = True
                break

        self._report("value iteration", iterations, converged, V)
        policy = generate_policy(self.world, Q)
        return Analysis.build(policy, V, Q, iterations=iterations, converged=converged)

    # ---------------------------------------------------------------------
    # 算法 2：Policy Iteration（完整策略评估 + 策略改进）
    # ---------------------------------------------------------------------
    def policy_evaluation(
        self,
        policy: List[Action],
        V_init: Optional[np.ndarray] = None,
        Q_init: Optional[np.ndarray] = None,
    ) -> Tuple[np.ndarray, np.ndarray, int, bool]:
        """
        反复做 T_π 备份直到收敛，判据同 value iteration。
        返回 (V, Q, sweeps, converged)。
        """
        V = self._zeros() if V_init is None else np.array(V_init, dtype=float)
        Q = self._zero_q() if Q_init is None else np.array(Q_init, dtype=float)

        iterations = 0
        while not self._cap_reached(iterations):
            iterations += 1
            V_new, Q = bellman_expectation_update(self.world, self.gamma, self.noise, policy, V, Q)
            delta = max_signed_delta(V_new, V)
            V = V_new
            if abs(delta) < self.cfg.epsilon and iterations > 1:
                return V, Q, iterations, True
        return V, Q, iterations, False

    def policy_improvement(
        self,
        policy: List[Action],
        V: np.ndarray,
        Q: Optional[np.ndarray] = None,
    ) -> Tuple[List[Action], np.ndarray, bool]:
        """
        对每个 Move 格重算 4 个方向的 Q 并取 argmax；Exit / None 保持不变。
        返回 (新策略, Q, 是否稳定)。
        """
        Q = self._zero_q() if Q is None else np.array(Q, dtype=float)
        improved: List[Action] = []
        for state in self.world.positions():
            s = self.world.index(state)
            a = policy[s]
            if not a.is_move:
                improved.append(a)
                continue
            Q[s] = q_values_of(self.world, state, self.gamma, self.noise, V)
            improved.append(Action.move(Direction(int(np.argmax(Q[s])))))

        return improved, Q, policy_equal(improved, policy)

    @record_time_decorator('policy iteration')
    def policy_iteration(self, pi_init: Optional[List[Action]] = None) -> Analysis:
        # 初始策略：确定性默认策略（全 Up）；也可以传入外部策略（例如 random_policy）
        policy = default_policy(self.world) if pi_init is None else list(pi_init)
        V, Q = self._zeros(), self._zero_q()

        rounds, sweeps, converged = 0, 0, True
        while True:
            rounds += 1
            V, Q, n, evaluated = self.policy_evaluation(policy, V, Q)
            sweeps += n
            if not evaluated:
                converged = False
                self.logger.warning(f"policy evaluation hit max_iter={self.cfg.max_iter} in round {rounds}")

            new_policy, Q, stable = self.policy_improvement(policy, V, Q)
            changed = sum(a != b for a, b in zip(new_policy, policy))
            self.logger.add_scalar("policy_iteration/changed_states", changed, rounds)
            policy = new_policy
            if stable:
                break
            if self._cap_reached(rounds):
                converged = False
                self.logger.warning(f"policy iteration stopped after {rounds} rounds without a stable policy")
                break

        self.logger.log(f"policy iteration: {rounds} improvement rounds, {sweeps} evaluation sweeps")
        self._report("policy iteration", sweeps, converged, V)
        return Analysis.build(policy, V, Q, iterations=sweeps, converged=converged)

    # ---------------------------------------------------------------------
    # 单步模式：每次调用推进一帧
    # ---------------------------------------------------------------------
    def reset(self) -> None:
        self.values = self._zeros()
        self.q_values = self._zero_q()
        if self.cfg.algorithm is Algorithm.POLICY_ITERATION:
            self.policy = default_policy(self.world)
        else:
            self.policy = [Action.none()] * self.world.area
        self.ticks = 0

    def step(self) -> Analysis:
        """
        value 模式：一次 T* 备份 + 贪心策略；
        policy 模式：一次 T_π 备份 + 一次策略改进。
        """
        self.ticks += 1
        if self.cfg.algorithm is Algorithm.POLICY_ITERATION:
            self.values, self.q_values = bellman_expectation_update(
                self.world, self.gamma, self.noise, self.policy, self.values, self.q_values
            )
            self.policy, self.q_values, _ = self.policy_improvement(self.policy, self.values, self.q_values)
        else:
            self.values, self.q_values = bellman_optimality_update(self.world, self.gamma, self.noise, self.values)
            self.policy = generate_policy(self.world, self.q_values)

        return Analysis.build(self.policy, self.values, self.q_values, iterations=self.ticks, converged=False)

    # ---------------------------------------------------------------------
    # 评估指标：Bellman 最优性残差
    # ---------------------------------------------------------------------
    def optimality_residual(self, V: np.ndarray) -> float:
        return bellman_residual_optimality(self.world, self.gamma, self.noise, V)

    # ---------------------------------------------------------------------
    # 辅助
    # ---------------------------------------------------------------------
    def _zeros(self) -> np.ndarray:
        return np.zeros(self.world.area, dtype=float)

    def _zero_q(self) -> np.ndarray:
        return np.zeros((self.world.area, N_DIRECTIONS), dtype=float)

    def _cap_reached(self, iterations: int) -> bool:
        return self.cfg.max_iter is not None and iterations >= self.cfg.max_iter

    def _report(self, name: str, iterations: int, converged: bool, V: np.ndarray) -> None:
        if converged:
            self.logger.log(f"{name} converged after {iterations} sweeps")
        else:
            self.logger.warning(f"{name} did not converge within max_iter={self.cfg.max_iter}")
        self.logger.log(f"{name} residual: {self.optimality_residual(V):.3e}")


# -------------------------------------------------------------------------
# 供可视化层调用的入口
# -------------------------------------------------------------------------
def solve(world: GridWorld, cfg: Optional[PlannerConfig] = None) -> Analysis:
    return VPPlanner(world, cfg).solve()


def run_value_iteration(world: GridWorld, discount: float, noise: float, epsilon: float) -> Analysis:
    """noise 为意图方向的概率。"""
    cfg = PlannerConfig(discount=discount, noise=noise, epsilon=epsilon, algorithm=Algorithm.VALUE_ITERATION)
    return VPPlanner(world, cfg).value_iteration()


def run_policy_iteration(world: GridWorld, discount: float, noise: float, epsilon: float) -> Analysis:
    """noise 为意图方向的概率。"""
    cfg = PlannerConfig(discount=discount, noise=noise, epsilon=epsilon, algorithm=Algorithm.POLICY_ITERATION)
    return VPPlanner(world, cfg).policy_iteration()
