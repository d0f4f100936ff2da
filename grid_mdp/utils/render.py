from ..grid_world import GridWorld
from ..domain_object import Action, ActionKind, Analysis, Direction
import logging
from typing import List, Optional

# 统一拿到命名 logger（与 LoggerManager 内一致）
def _get_logger():
    return logging.getLogger("GridWorldLogger")

def _cell_label(env: GridWorld, x: int, y: int) -> Optional[str]:
    state_id = y * env.width + x
    if env.board[state_id] != 0:
        return "XX"
    reward = env.exits[state_id]
    if reward is not None:
        return f"E{reward:+.1f}"
    return None

def render_value_grid(env: GridWorld, analysis: Analysis, ndigits: int = 2):
    _get_logger().info("\n[State Values] min=%.*f max=%.*f",
                       ndigits, analysis.min_value, ndigits, analysis.max_value)
    width = ndigits + 4
    for y in range(env.height):
        row = []
        for x in range(env.width):
            label = _cell_label(env, x, y)
            if label == "XX":
                row.append("XX".center(width))
            else:
                row.append(f"{analysis.values[y * env.width + x]: .{ndigits}f}".rjust(width))
        _get_logger().info(" | ".join(row))

def render_action_values_grid(
    env: GridWorld,
    analysis: Analysis,
    ndigits: int = 2,
    pad: int = 6,
    h_gap: int = 1,
    v_gap: int = 0,
):
    """
    将每个 state 的 4 个 action-value 渲染为带边框的小盒子：
        ┌───────────────┐
        │      UP       │
        │ LEFT    RIGHT │
        │     DOWN      │
        └───────────────┘
    墙格标 XX，exit 格标出奖励；每个 state 独立成框，彼此之间用空列/空行分隔。

    参数
    ----
    env    : GridWorld
    analysis: 求解结果，读取其中的 q_values
    ndigits: 小数位数
    pad    : 单个数值的定宽（用于对齐）
    h_gap  : 相邻 state（同一行）的水平空列数
    v_gap  : 相邻 state 行块之间的空行数
    """
    _get_logger().info("\n[Action Values - Boxed]")

    def fmt(v: float) -> str:
        return f"{v: .{ndigits}f}".rjust(pad)

    # 中行包含 LEFT、RIGHT 两个数值，中间空一个数值宽度
    box_inner_w = pad * 3 + 2
    horiz = "─" * box_inner_w
    hspace_between = " " * h_gap

    for y in range(env.height):
        lines: List[List[str]] = [[], [], [], [], []]

        for x in range(env.width):
            label = _cell_label(env, x, y)
            if label is not None:
                body = ["", label, ""]
            else:
                q_s = analysis.q_values[y * env.width + x]
                body = [
                    fmt(q_s[Direction.UP.value]),
                    f"{fmt(q_s[Direction.LEFT.value])} {' ' * pad} {fmt(q_s[Direction.RIGHT.value])}",
                    fmt(q_s[Direction.DOWN.value]),
                ]

            lines[0].append("┌" + horiz + "┐")
            for i, text in enumerate(body, start=1):
                lines[i].append("│" + text.center(box_inner_w) + "│")
            lines[4].append("└" + horiz + "┘")

        for line in lines:
            _get_logger().info(hspace_between.join(line))

        # 行块之间加空行（视觉分隔）
        for _ in range(v_gap):
            _get_logger().info("")

def render_policy_grid(env: GridWorld, analysis: Analysis):
    arrow = {Direction.UP: "↑", Direction.RIGHT: "→", Direction.DOWN: "↓", Direction.LEFT: "←"}
    _get_logger().info("\n[Policy]")
    for y in range(env.height):
        row = []
        for x in range(env.width):
            a: Action = analysis.policy[y * env.width + x]
            if a.kind is ActionKind.EXIT:
                row.append("E")
            elif a.kind is ActionKind.MOVE:
                row.append(arrow[a.direction])
            else:
                row.append("X" if env.board[y * env.width + x] != 0 else "·")
        _get_logger().info(" ".join(row))
