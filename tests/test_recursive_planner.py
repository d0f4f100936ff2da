"""
自顶向下（备忘录）求解器测试
"""

import unittest
import sys
import os

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from grid_mdp.grid_world import default_world
from grid_mdp.domain_object import Action, Direction, Position
from grid_mdp.algorithms.recursive_planner import RecursivePlanner
from grid_mdp.algorithms.vp_planner import run_value_iteration
from grid_mdp.utils.mdp_ops import bellman_optimality_update


class TestRecursivePlanner(unittest.TestCase):

    def setUp(self):
        self.world = default_world()
        self.planner = RecursivePlanner(self.world, discount=0.9, noise=0.8)

    def test_depth_zero_is_zero(self):
        np.testing.assert_array_equal(self.planner.values(0), np.zeros(self.world.area))

    def test_matches_bottom_up_sweeps(self):
        """深度 k 的值等于自底向上 k 轮 T* 备份"""
        V = np.zeros(self.world.area)
        for k in range(1, 10):
            V, _ = bellman_optimality_update(self.world, 0.9, 0.8, V)
            with self.subTest(depth=k):
                np.testing.assert_allclose(self.planner.values(k), V, atol=1e-12)

    def test_each_pair_computed_once(self):
        self.planner.values(6)
        evaluations = self.planner.evaluations
        self.assertEqual(evaluations, len(self.planner.memo))

        # 再次查询全部命中缓存
        self.planner.values(6)
        self.planner.value(Position(0, 0), 3)
        self.assertEqual(self.planner.evaluations, evaluations)

    def test_deep_query_does_not_recurse(self):
        v = self.planner.value(Position(2, 0), 2000)
        reference = run_value_iteration(self.world, 0.9, 0.8, 1e-10)
        self.assertAlmostEqual(v, reference.values[self.world.index(Position(2, 0))], places=6)

    def test_walls_and_exits(self):
        self.assertEqual(self.planner.value(Position(1, 1), 5), 0.0)
        self.assertEqual(self.planner.value(Position(3, 0), 5), 1.0)
        self.assertEqual(self.planner.value(Position(3, 1), 1), -1.0)

    def test_analysis(self):
        analysis = self.planner.analysis(50)
        self.assertEqual(analysis.q_values.shape, (self.world.area, 4))
        self.assertEqual(analysis.iterations, 50)
        self.assertEqual(analysis.policy[self.world.index(Position(2, 0))], Action.move(Direction.RIGHT))
        self.assertEqual(analysis.policy[self.world.index(Position(1, 1))], Action.none())
        self.assertEqual(analysis.policy[self.world.index(Position(3, 1))], Action.exit())

    def test_q_values_use_previous_depth(self):
        q = self.planner.q_values(Position(2, 0), 2)
        self.assertAlmostEqual(q[Direction.RIGHT.value], 0.72)
        np.testing.assert_array_equal(self.planner.q_values(Position(3, 0), 2), np.zeros(4))

    def test_clear(self):
        self.planner.values(3)
        self.planner.clear()
        self.assertEqual(self.planner.evaluations, 0)
        self.assertEqual(len(self.planner.memo), 0)


if __name__ == "__main__":
    unittest.main()
