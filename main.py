from grid_mdp.grid_world import load_world_or_default
from grid_mdp.algorithms.vp_planner import run_value_iteration, run_policy_iteration
from grid_mdp.utils.render import render_value_grid, render_policy_grid
from grid_mdp.utils.timing import out_profile

# -----------------------------
# 用法示例
# -----------------------------
if __name__ == "__main__":
    # 4x3 网格；墙 (1,1)；出口 (3,0)=+1，(3,1)=-1；文件缺失时回退到同样的默认世界
    world = load_world_or_default("worlds/default.txt")

    # noise=0.8：按意图方向移动的概率
    vi = run_value_iteration(world, discount=0.9, noise=0.8, epsilon=1e-4)
    render_value_grid(world, vi)
    render_policy_grid(world, vi)

    pi = run_policy_iteration(world, discount=0.9, noise=0.8, epsilon=1e-4)
    render_value_grid(world, pi)
    render_policy_grid(world, pi)

    out_profile("logs/")
