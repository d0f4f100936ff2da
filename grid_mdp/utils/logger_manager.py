# -*- coding: utf-8 -*-
from __future__ import annotations
import logging
import os
from typing import Dict, Optional
from torch.utils.tensorboard import SummaryWriter

LOGGER_NAME = "GridWorldLogger"

_FORMATTER = logging.Formatter(
    fmt="%(asctime)s %(levelname)s %(module)s - %(funcName)s: %(message)s",
    datefmt="%m/%d/%Y %I:%M:%S %p",
)

# 进程内共享：一个控制台 handler，每个 run.log 路径一个文件 handler
_console_handler: Optional[logging.Handler] = None
_file_handlers: Dict[str, logging.FileHandler] = {}


def _ensure_console_handler(logger: logging.Logger) -> None:
    global _console_handler
    if _console_handler is None:
        _console_handler = logging.StreamHandler()
        _console_handler.setFormatter(_FORMATTER)
    if _console_handler not in logger.handlers:
        logger.addHandler(_console_handler)


class LoggerManager:
    """
    统一管理 logging 与 tensorboard writer。
    log_dir 为 None 时只输出到控制台，不写 run.log，也不建 tensorboard writer。
    只增不删：不会卸掉其他实例挂在同名 logger 上的 handler；
    同一个 run.log 路径只挂一个文件 handler。
    """
    def __init__(self, log_dir: Optional[str] = None, use_tensorboard: bool = False):
        # ---- Python logging ----
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(logging.INFO)
        _ensure_console_handler(self.logger)

        self._file_handler: Optional[logging.FileHandler] = None
        if log_dir is not None:
            os.makedirs(log_dir, exist_ok=True)
            path = os.path.abspath(os.path.join(log_dir, "run.log"))
            handler = _file_handlers.get(path)
            if handler is None or handler not in self.logger.handlers:
                handler = logging.FileHandler(path, mode="w", encoding="utf-8")
                handler.setFormatter(_FORMATTER)
                self.logger.addHandler(handler)
                _file_handlers[path] = handler
                # 只有创建者在 close() 时负责卸载
                self._file_handler = handler

        # ---- Tensorboard Writer ----
        self.writer = SummaryWriter(log_dir) if (use_tensorboard and log_dir is not None) else None

    def log(self, msg: str):
        self.logger.info(msg)

    def info(self, msg: str):
        self.logger.info(msg)

    def warning(self, msg: str):
        self.logger.warning(msg)

    def debug(self, msg: str):
        self.logger.debug(msg)

    def error(self, msg: str):
        self.logger.error(msg)

    def add_scalar(self, tag: str, value: float, step: int):
        if self.writer is not None:
            self.writer.add_scalar(tag, value, step)

    def close(self):
        if self.writer is not None:
            self.writer.close()
            self.writer = None
        if self._file_handler is not None:
            self.logger.removeHandler(self._file_handler)
            self._file_handler.close()
            _file_handlers.pop(self._file_handler.baseFilename, None)
            self._file_handler = None
