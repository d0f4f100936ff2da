# -*- coding: utf-8 -*-
from grid_mdp.grid_world import load_world_or_default
from grid_mdp.algorithms.vp_planner import VPPlanner, PlannerConfig, Algorithm
from grid_mdp.utils.render import render_value_grid, render_policy_grid, render_action_values_grid


if __name__ == "__main__":
    world = load_world_or_default("worlds/default.txt")

    cfg = PlannerConfig(discount=0.9, noise=0.8, epsilon=1e-4, algorithm=Algorithm.VALUE_ITERATION)
    planner = VPPlanner(world, cfg, log_dir="logs/value_iteration", use_tb=True)

    analysis = planner.value_iteration()
    planner.logger.log("\n=== Value Iteration ===")
    render_value_grid(world, analysis)
    render_action_values_grid(world, analysis)
    render_policy_grid(world, analysis)
    planner.logger.close()
