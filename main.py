"""
Pygame frontend for the chipax CHIP-8 / Super-CHIP interpreter
"""

import time

import hydra
import numpy as np
import pygame
from omegaconf import DictConfig, OmegaConf

from chipax import Machine, EmulatorFault, ProgramTooLargeError
from chipax.keypad import pressed_keys
from chipax.logging import TraceLogger
from chipax.runner import ticks_per_frame
from chipax.rendering import display_to_rgb, create_color_scheme

# 4x4 block on the left of a QWERTY keyboard, laid out like the COSMAC VIP keypad
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def build_machine(cfg: DictConfig, program: bytes) -> Machine:
    return Machine(
        program,
        seed=cfg.seed,
        hires=cfg.hires,
        index_increment=cfg.index_increment,
    )


def draw_screen(surface, machine: Machine, window_size, colors):
    """Blit the machine's current screen, stretched to the window."""
    on_color, off_color = colors
    rgb = display_to_rgb(machine.screen(), scale=1, on_color=on_color, off_color=off_color)
    frame = pygame.surfarray.make_surface(np.ascontiguousarray(rgb.swapaxes(0, 1)))
    surface.blit(pygame.transform.scale(frame, window_size), (0, 0))


def run_emulator(cfg: DictConfig):
    """Main emulator loop.

    LShift toggles single-step mode, Space runs one instruction while stepping,
    Tab reloads the program, Escape quits.
    """
    logger = TraceLogger(log_level=cfg.log_level)

    try:
        with open(cfg.rom, "rb") as f:
            program = f.read()
        machine = build_machine(cfg, program)
    except (OSError, ProgramTooLargeError) as e:
        logger.error(f"Cannot load {cfg.rom}: {e}")
        return

    ticks = ticks_per_frame(cfg.instruction_frequency, cfg.fps)
    logger.log_run_start({**OmegaConf.to_container(cfg), "ticks_per_frame": ticks})

    pygame.init()
    window_size = (128 * cfg.scale, 64 * cfg.scale)
    screen = pygame.display.set_mode(window_size)
    pygame.display.set_caption(f"chipax - {cfg.rom}")
    clock = pygame.time.Clock()
    colors = create_color_scheme(cfg.color_scheme)

    running = True
    halted = False
    stepping = False
    step_next = False
    instruction_count = 0
    start_time = time.time()

    while running:
        clock.tick(cfg.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE and stepping:
                    step_next = True
                elif event.key in KEY_MAP:
                    machine.set_key(KEY_MAP[event.key], True)
            elif event.type == pygame.KEYUP:
                if event.key == pygame.K_LSHIFT:
                    stepping = not stepping
                    logger.info(f"Single-step mode {'on' if stepping else 'off'}")
                elif event.key == pygame.K_TAB:
                    machine = build_machine(cfg, program)
                    halted = False
                    instruction_count = 0
                    logger.info("Program reloaded")
                elif event.key in KEY_MAP:
                    machine.set_key(KEY_MAP[event.key], False)

        if not halted:
            try:
                if stepping:
                    if step_next:
                        pc = int(machine.state.pc)
                        instruction = machine.tick()
                        instruction_count += 1
                        logger.info(
                            f"{pc:#05x}: {instruction.raw:04X}  {instruction}"
                            f"  keys={pressed_keys(machine.state.keypad)}"
                        )
                        step_next = False
                else:
                    for _ in range(ticks):
                        pc = int(machine.state.pc)
                        instruction = machine.tick()
                        instruction_count += 1
                        if cfg.trace:
                            logger.log_instruction(pc, instruction)
                    machine.decrement_timer()
            except EmulatorFault as e:
                logger.critical(f"Emulation halted: {e}")
                halted = True

        draw_screen(screen, machine, window_size, colors)
        pygame.display.flip()

    pygame.quit()

    runtime = time.time() - start_time
    logger.log_run_end({
        "instructions": instruction_count,
        "instructions_per_second": instruction_count / runtime if runtime > 0 else 0.0,
    })


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    run_emulator(cfg)


if __name__ == "__main__":
    main()
