"""Headless driver loop: fixed ticks per frame, one timer step per frame."""

from typing import List, Optional

from chipax.errors import EmulatorFault
from chipax.logging import LoggingCallback, build_tqdm_progress_bar, merge_statistics
from chipax.machine import Machine


def ticks_per_frame(instruction_frequency: int = 600, fps: int = 60) -> int:
    """Number of instructions to run per frame for a target CPU frequency in Hz."""
    return max(1, instruction_frequency // fps)


def run_frame(machine: Machine, ticks: int, callbacks: List[LoggingCallback] = ()) -> None:
    """Run ``ticks`` instructions, then decrement the timers once."""
    for _ in range(ticks):
        pc = int(machine.state.pc)
        instruction = machine.tick()
        for callback in callbacks:
            callback.on_tick(pc, instruction)
    machine.decrement_timer()


def run_frames(
    machine: Machine,
    frames: int,
    ticks: Optional[int] = None,
    callbacks: Optional[List[LoggingCallback]] = None,
    progress: bool = False,
) -> Machine:
    """Drive ``machine`` for ``frames`` frames of ``ticks`` instructions each.

    ``ticks`` defaults to ``ticks_per_frame()``, about 600 Hz at 60 frames per
    second. The timers decay once per frame whatever ``ticks`` is, so the tick
    count only changes emulation speed. Faults propagate after the callbacks
    have seen the end of the run.
    """
    if ticks is None:
        ticks = ticks_per_frame()
    callbacks = list(callbacks or [])
    for callback in callbacks:
        callback.on_run_start({"frames": frames, "ticks_per_frame": ticks, "hires": machine.hires})

    update_progress_bar, close_progress_bar = (
        build_tqdm_progress_bar(frames) if progress else (None, None)
    )

    summary = {}
    try:
        for frame in range(frames):
            run_frame(machine, ticks, callbacks)
            for callback in callbacks:
                callback.on_frame(frame, machine)
            if update_progress_bar:
                update_progress_bar(1)
    except EmulatorFault as e:
        summary["fault"] = str(e)
        raise
    finally:
        if close_progress_bar:
            close_progress_bar()
        summary.update(merge_statistics(callbacks))
        for callback in callbacks:
            callback.on_run_end(summary)

    return machine
