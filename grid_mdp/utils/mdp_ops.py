# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import numpy as np

from grid_mdp.grid_world import GridWorld
from grid_mdp.domain_object import Action, ActionKind, Direction, Position

N_DIRECTIONS = len(Direction.all())


# ---- Q(s,a)：单个动作的期望回报 ----------------------------------------------
def value_of(
    world: GridWorld,
    state: Position,
    action: Action,
    discount: float,
    noise: float,
    values,
) -> float:
    """
    Exit    -> 立即奖励（终止，无后续）
    Move(d) -> Σ p * (r + γ * V(move_to(s, d')))，d' 取自 transition 分布
    None    -> 0

    values 只需支持 values[cell_index]（np.ndarray 或 dict 均可）。
    noise 为意图方向的概率。
    """
    if action.kind is ActionKind.EXIT:
        return world.reward(state, action)

    if action.kind is not ActionKind.MOVE:
        return 0.0

    acc = 0.0
    for tr in world.transition(state, action, noise) or []:
        target = world.move_to(state, tr.action.direction)
        acc += tr.prob * (world.reward(state, tr.action) + discount * values[world.index(target)])
    return acc


def q_values_of(
    world: GridWorld,
    state: Position,
    discount: float,
    noise: float,
    values,
) -> np.ndarray:
    """按 {Up, Right, Down, Left} 顺序返回 4 个方向的 Q 值。"""
    return np.array(
        [value_of(world, state, Action.move(d), discount, noise, values) for d in Direction.all()],
        dtype=float,
    )


# ---- T* V：Bellman 最优性备份（同步，写入新数组） -------------------------------
def bellman_optimality_update(
    world: GridWorld,
    discount: float,
    noise: float,
    values: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    (T* V)(s) = max_a Q(s,a)
      - 无效格 -> 0
      - exit 格 -> 立即奖励
    只读旧 values，结果写入新数组，不做原地更新。
    """
    V_new = np.zeros(world.area, dtype=float)
    Q_new = np.zeros((world.area, N_DIRECTIONS), dtype=float)
    for state in world.positions():
        s = world.index(state)
        if not world.valid_position(state):
            continue
        if world.can_exit(state):
            V_new[s] = world.reward(state, Action.exit())
            continue

        q_s = q_values_of(world, state, discount, noise, values)
        Q_new[s] = q_s
        V_new[s] = q_s.max()
    return V_new, Q_new


# ---- T_π V：给定确定性策略的期望备份 -----------------------------------------
def bellman_expectation_update(
    world: GridWorld,
    discount: float,
    noise: float,
    policy: Sequence[Action],
    values: np.ndarray,
    q_values: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    (T_π V)(s) = Q(s, π(s))。
    返回的 Q 是 q_values 的拷贝，仅覆盖 π(s) 所选方向那一列。
    """
    V_new = np.zeros(world.area, dtype=float)
    if q_values is None:
        Q_new = np.zeros((world.area, N_DIRECTIONS), dtype=float)
    else:
        Q_new = np.array(q_values, dtype=float)

    for state in world.positions():
        s = world.index(state)
        a = policy[s]
        V_new[s] = value_of(world, state, a, discount, noise, values)
        if a.is_move:
            Q_new[s, a.direction.value] = V_new[s]
    return V_new, Q_new


# ---- 收敛判据 -----------------------------------------------------------------
def max_signed_delta(V_new: np.ndarray, V_old: np.ndarray) -> float:
    """
    max_s (V_new(s) - V_old(s))，注意是带符号的差取最大，
    调用方再对结果取 abs 与 epsilon 比较。
    """
    if V_new.size == 0:
        return 0.0
    return float(np.max(V_new - V_old))


# ---- 策略：贪心 / 默认 / 随机 ---------------------------------------------------
def generate_policy(world: GridWorld, q_values: np.ndarray) -> List[Action]:
    """
    墙 -> None，exit -> Exit，其余 -> Move(argmax_a Q)。
    并列时取 {Up, Right, Down, Left} 中先出现者（np.argmax 返回首个最大值）。
    """
    policy: List[Action] = []
    for state in world.positions():
        if not world.valid_position(state):
            policy.append(Action.none())
        elif world.can_exit(state):
            policy.append(Action.exit())
        else:
            best = int(np.argmax(q_values[world.index(state)]))
            policy.append(Action.move(Direction(best)))
    return policy


def default_policy(world: GridWorld) -> List[Action]:
    """确定性初始策略：exit -> Exit，无效 -> None，其余一律 Move(Up)。"""
    return _initial_policy(world, lambda: Direction.UP)


def random_policy(world: GridWorld, rng: np.random.Generator) -> List[Action]:
    """与 default_policy 相同，但普通格的方向由注入的 rng 抽样，便于复现。"""
    directions = Direction.all()
    return _initial_policy(world, lambda: directions[int(rng.integers(len(directions)))])


def _initial_policy(world: GridWorld, pick) -> List[Action]:
    policy: List[Action] = []
    for state in world.positions():
        if not world.valid_position(state):
            policy.append(Action.none())
        elif world.can_exit(state):
            policy.append(Action.exit())
        else:
            policy.append(Action.move(pick()))
    return policy


# ---- 策略相等性判断（供 PI 收敛判据） -----------------------------------------
def policy_equal(pi1: Sequence[Action], pi2: Sequence[Action]) -> bool:
    return len(pi1) == len(pi2) and all(a == b for a, b in zip(pi1, pi2))


# ---- ||T*V - V||_inf --------------------------------------------------------
def bellman_residual_optimality(
    world: GridWorld,
    discount: float,
    noise: float,
    values: np.ndarray,
) -> float:
    """最优性残差：||T* V - V||_inf，仅作诊断输出。"""
    if world.area == 0:
        return 0.0
    V_next, _ = bellman_optimality_update(world, discount, noise, values)
    return float(np.max(np.abs(V_next - values)))
