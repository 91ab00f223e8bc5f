"""Console logging utilities for chipax runs.

This module provides a small logging system with callbacks and formatters for
visibility into the emulation loop: coloured levelled console output, an
instruction trace, per-op statistics and a tqdm progress bar for headless runs.
"""

import time
import sys
from collections import Counter
from typing import Any, Dict, List, Optional, Callable, Tuple

from tqdm import tqdm

from chipax.decode import Instruction


class ConsoleLogger:
    """Flexible console logger with levels, timestamps and colors."""

    def __init__(
        self,
        name: str = "Chipax",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream or sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)


class TraceLogger(ConsoleLogger):
    """Logger for emulation runs: configuration banner, instruction trace, summary."""

    def __init__(self, name: str = "Chipax", **kwargs):
        super().__init__(name, **kwargs)
        self.instruction_count = 0

    def log_run_start(self, config: Dict[str, Any]):
        """Log run configuration."""
        self.info("=" * 60)
        self.info("Starting emulation with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_instruction(self, pc: int, instruction: Instruction):
        """Trace one executed instruction at DEBUG level."""
        self.instruction_count += 1
        self.debug(f"{pc:#05x}: {instruction.raw:04X}  {instruction}")

    def log_run_end(self, summary: Dict[str, Any]):
        """Log run completion."""
        elapsed = time.time() - self.start_time
        self.info("=" * 60)
        self.info(f"Emulation stopped after {elapsed:.1f}s")
        for key, value in summary.items():
            if isinstance(value, float):
                self.info(f"  {key}: {value:.2f}")
            else:
                self.info(f"  {key}: {value}")
        self.info("=" * 60)


class LoggingCallback:
    """Base class for run callbacks."""

    def on_run_start(self, config: Dict[str, Any]):
        """Called before the first frame."""
        pass

    def on_tick(self, pc: int, instruction: Instruction):
        """Called after each executed instruction with the PC it was fetched from."""
        pass

    def on_frame(self, frame: int, machine: Any):
        """Called after each frame's ticks and timer update."""
        pass

    def on_run_end(self, summary: Dict[str, Any]):
        """Called once the run finishes or faults."""
        pass


class ConsoleCallback(LoggingCallback):
    """Console logging callback. Traces instructions when ``trace`` is set."""

    def __init__(self, trace: bool = False, logger: Optional[TraceLogger] = None):
        self.trace = trace
        self.logger = logger or TraceLogger(log_level="DEBUG" if trace else "INFO")

    def on_run_start(self, config: Dict[str, Any]):
        self.logger.log_run_start(config)

    def on_tick(self, pc: int, instruction: Instruction):
        if self.trace:
            self.logger.log_instruction(pc, instruction)

    def on_run_end(self, summary: Dict[str, Any]):
        self.logger.log_run_end(summary)


class InstructionStatsCallback(LoggingCallback):
    """Counts executed instructions per op."""

    def __init__(self):
        self.counts = Counter()
        self.frames = 0

    def on_tick(self, pc: int, instruction: Instruction):
        self.counts[instruction.op] += 1

    def on_frame(self, frame: int, machine: Any):
        self.frames += 1

    def get_statistics(self, top: int = 5) -> Dict[str, Any]:
        """Totals plus the ``top`` most frequent mnemonics."""
        total = sum(self.counts.values())
        return {
            "instructions": total,
            "frames": self.frames,
            "most_common": [(op.value, count) for op, count in self.counts.most_common(top)],
        }


def build_tqdm_progress_bar(
    n: int,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build a tqdm progress bar over ``n`` frames.

    Returns an ``update(steps)`` and a ``close()`` function.
    """
    if desc is None:
        desc = f"Emulating ({n:,} frames)"

    for kwarg in ("total",):
        kwargs.pop(kwarg, None)

    bar = tqdm(total=n, desc=desc, unit="frame", **kwargs)

    def update_progress_bar(steps: int = 1):
        bar.update(int(steps))

    def close_progress_bar():
        bar.close()

    return update_progress_bar, close_progress_bar


def merge_statistics(callbacks: List[LoggingCallback]) -> Dict[str, Any]:
    """Collect statistics from every callback that exposes ``get_statistics``."""
    summary = {}
    for callback in callbacks:
        if hasattr(callback, "get_statistics"):
            summary.update(callback.get_statistics())
    return summary
