# -*- coding: utf-8 -*-
import numpy as np

from grid_mdp.grid_world import load_world_or_default
from grid_mdp.algorithms.vp_planner import VPPlanner, PlannerConfig, Algorithm
from grid_mdp.utils.mdp_ops import random_policy
from grid_mdp.utils.render import render_value_grid, render_policy_grid


if __name__ == "__main__":
    world = load_world_or_default("worlds/bridge.txt")

    cfg = PlannerConfig(discount=0.9, noise=0.8, epsilon=1e-6, algorithm=Algorithm.POLICY_ITERATION)
    planner = VPPlanner(world, cfg, log_dir="logs/policy_iteration", use_tb=True)

    # 1) 确定性默认初始策略（全 Up）
    analysis = planner.policy_iteration()
    planner.logger.log("\n=== Policy Iteration (default init) ===")
    render_value_grid(world, analysis)
    render_policy_grid(world, analysis)

    # 2) 随机初始策略，rng 注入保证可复现
    analysis = planner.policy_iteration(pi_init=random_policy(world, np.random.default_rng(42)))
    planner.logger.log("\n=== Policy Iteration (random init, seed=42) ===")
    render_value_grid(world, analysis)
    render_policy_grid(world, analysis)
    planner.logger.close()
