from .grid_world import GridWorld, WorldLoadError, default_world, load_world_or_default
from .domain_object import Action, ActionKind, Analysis, Direction, Position, Transition
from .algorithms.vp_planner import (
    Algorithm,
    EvaluationMode,
    PlannerConfig,
    VPPlanner,
    run_policy_iteration,
    run_value_iteration,
    solve,
)
from .algorithms.recursive_planner import RecursivePlanner
