# -*- coding: utf-8 -*-
import time

from grid_mdp.grid_world import load_world_or_default
from grid_mdp.algorithms.vp_planner import VPPlanner, PlannerConfig, Algorithm, EvaluationMode
from grid_mdp.utils.render import render_value_grid, render_policy_grid


if __name__ == "__main__":
    world = load_world_or_default("worlds/default.txt")

    # 单步模式：每个 tick 只做一轮 sweep，模拟逐帧动画
    cfg = PlannerConfig(discount=0.9, noise=0.8, algorithm=Algorithm.POLICY_ITERATION, mode=EvaluationMode.SINGLE_STEP)
    planner = VPPlanner(world, cfg, log_dir="logs/animated", use_tb=True)

    for tick in range(12):
        analysis = planner.solve()
        planner.logger.log(f"\n=== tick {tick + 1} ===")
        render_value_grid(world, analysis)
        render_policy_grid(world, analysis)
        time.sleep(0.2)
    planner.logger.close()
