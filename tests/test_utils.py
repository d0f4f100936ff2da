"""
日志、计时与文本渲染工具测试
"""

import unittest
import tempfile
import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from grid_mdp.grid_world import default_world
from grid_mdp.algorithms.vp_planner import VPPlanner, run_value_iteration
from grid_mdp.utils.logger_manager import LoggerManager, LOGGER_NAME
from grid_mdp.utils import timing
from grid_mdp.utils.render import render_value_grid, render_policy_grid, render_action_values_grid


class TestRender(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.world = default_world()
        cls.analysis = run_value_iteration(cls.world, 0.9, 0.8, 1e-4)

    def test_value_grid(self):
        with self.assertLogs(LOGGER_NAME, level="INFO") as cm:
            render_value_grid(self.world, self.analysis)
        self.assertEqual(len(cm.output), 1 + self.world.height)
        self.assertIn("XX", cm.output[2])
        self.assertIn("1.00", cm.output[1])

    def test_policy_grid(self):
        with self.assertLogs(LOGGER_NAME, level="INFO") as cm:
            render_policy_grid(self.world, self.analysis)
        self.assertEqual(len(cm.output), 1 + self.world.height)
        self.assertTrue(cm.output[1].endswith("→ → → E"))
        self.assertIn("X", cm.output[2])

    def test_action_values_grid(self):
        with self.assertLogs(LOGGER_NAME, level="INFO") as cm:
            render_action_values_grid(self.world, self.analysis, v_gap=1)
        # 标题 + 每行 5 条 + 每行 1 条空行
        self.assertEqual(len(cm.output), 1 + 6 * self.world.height)
        self.assertIn("E+1.0", "".join(cm.output))


class TestLoggerManager(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()
        self.tmp.cleanup()

    def _file_handlers(self):
        return [h for h in logging.getLogger(LOGGER_NAME).handlers if isinstance(h, logging.FileHandler)]

    def test_writes_run_log(self):
        manager = LoggerManager(self.tmp.name)
        manager.log("hello grid")
        manager.close()
        with open(os.path.join(self.tmp.name, "run.log"), encoding="utf-8") as f:
            self.assertIn("hello grid", f.read())

    def test_handlers_not_duplicated(self):
        LoggerManager()
        LoggerManager()
        consoles = [h for h in logging.getLogger(LOGGER_NAME).handlers if type(h) is logging.StreamHandler]
        self.assertEqual(len(consoles), 1)

    def test_same_run_log_attached_once(self):
        first = LoggerManager(self.tmp.name)
        LoggerManager(self.tmp.name)
        self.assertEqual(len(self._file_handlers()), 1)
        first.close()
        self.assertEqual(self._file_handlers(), [])

    def test_console_only_manager_keeps_existing_run_log(self):
        manager = LoggerManager(self.tmp.name)
        LoggerManager(None)
        self.assertEqual(len(self._file_handlers()), 1)
        manager.log("still here")
        manager.close()
        with open(os.path.join(self.tmp.name, "run.log"), encoding="utf-8") as f:
            self.assertIn("still here", f.read())

    def test_later_solve_keeps_planner_run_log(self):
        planner = VPPlanner(default_world(), log_dir=self.tmp.name)
        run_value_iteration(default_world(), 0.9, 0.8, 1e-4)
        planner.logger.log("after another solve")
        planner.logger.close()
        with open(os.path.join(self.tmp.name, "run.log"), encoding="utf-8") as f:
            self.assertIn("after another solve", f.read())

    def test_tensorboard_scalars(self):
        manager = LoggerManager(self.tmp.name, use_tensorboard=True)
        manager.add_scalar("value_iteration/delta", 0.5, 1)
        manager.close()
        self.assertTrue(any(name.startswith("events.out.tfevents") for name in os.listdir(self.tmp.name)))

    def test_no_writer_without_log_dir(self):
        manager = LoggerManager(None, use_tensorboard=True)
        self.assertIsNone(manager.writer)
        manager.add_scalar("x", 1.0, 1)


class TestTiming(unittest.TestCase):

    def setUp(self):
        timing.clear_profile()

    def test_record_time_decorator(self):
        @timing.record_time_decorator("unit task")
        def work(x):
            return x * 2

        with self.assertLogs(LOGGER_NAME, level="INFO"):
            self.assertEqual(work(21), 42)
        self.assertIn("unit task", [name for name, _ in timing.tasks])

        with tempfile.TemporaryDirectory() as tmp:
            timing.out_profile(tmp)
            with open(os.path.join(tmp, "time_profile.txt"), encoding="utf-8") as f:
                self.assertIn("unit task:", f.read())
        self.assertEqual(timing.tasks, [])

    def test_repeated_solves_do_not_accumulate(self):
        for _ in range(3):
            run_value_iteration(default_world(), 0.9, 0.8, 1e-4)
        self.assertGreaterEqual(len(timing.tasks), 3)
        timing.clear_profile()
        self.assertEqual(timing.tasks, [])


if __name__ == "__main__":
    unittest.main()
