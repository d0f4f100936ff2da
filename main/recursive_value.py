# -*- coding: utf-8 -*-
from grid_mdp.grid_world import default_world
from grid_mdp.algorithms.recursive_planner import RecursivePlanner
from grid_mdp.utils.logger_manager import LoggerManager
from grid_mdp.utils.render import render_value_grid, render_policy_grid


if __name__ == "__main__":
    logger = LoggerManager("logs/recursive")
    world = default_world()
    planner = RecursivePlanner(world, discount=0.9, noise=0.8)

    for depth in (1, 5, 50):
        analysis = planner.analysis(depth)
        logger.log(f"\n=== Recursive (memoized), depth={depth} ===")
        render_value_grid(world, analysis)
        render_policy_grid(world, analysis)
