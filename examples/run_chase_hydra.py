"""Hydra-configurable batch runner for the chase simulation.

Runs a number of attempts per strategy, logs outcomes to TensorBoard and
optionally saves a trajectory plot and a GIF of the last attempt.

Usage:
    python examples/run_chase_hydra.py
    python examples/run_chase_hydra.py strategy=predictive num_attempts=50
    python examples/run_chase_hydra.py target_speed=12 sensitivity=0.5
    python examples/run_chase_hydra.py --multirun strategy=direct,predictive,patrol
"""
import logging
import os
from dataclasses import dataclass

import jax
import matplotlib.pyplot as plt
import matplotlib.patches as patches
import numpy as np
from matplotlib.animation import FuncAnimation, PillowWriter

import hydra
from hydra.core.config_store import ConfigStore
from omegaconf import OmegaConf
from tensorboardX import SummaryWriter
from tqdm import tqdm

from chasesim import ChaseSimulation, Outcome
from chasesim.config import params_from_dict
from chasesim.util import plot_chase

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

@dataclass
class ChaseConfig:
    """Configuration for a batch of chase attempts."""

    # Experiment
    exp_name: str = "chase"
    seed: int = 0
    strategy: str = "direct"
    num_attempts: int = 20
    max_frames: int = 2000

    # Arena
    width: float = 1400.0
    height: float = 900.0

    # Agents
    target_speed: float = 8.0
    chaser_speed: float = 9.0
    detection_radius: float = 300.0
    sensitivity: float = 0.9
    detection_method: str = "radius"
    capture_distance: float = 60.0

    # Output
    save_plots: bool = True
    save_gif: bool = False
    gif_stride: int = 4


cs = ConfigStore.instance()
cs.store(name="config", node=ChaseConfig)


def record_attempt(sim: ChaseSimulation, max_frames: int):
    """Step one attempt and return (outcome, chaser positions, target positions)."""
    chaser_xy = [tuple(sim.chaser.position)]
    target_xy = [tuple(sim.target.position)]
    outcome = Outcome.NONE
    for _ in range(max_frames):
        outcome = sim.step()
        chaser_xy.append(tuple(sim.chaser.position))
        target_xy.append(tuple(sim.target.position))
        if outcome is not Outcome.NONE:
            break
    return outcome, np.array(chaser_xy), np.array(target_xy)


def save_attempt_gif(chaser_xy, target_xy, sim: ChaseSimulation, filename: str, stride: int = 4):
    """Save an animated GIF of one attempt."""
    params = sim.params
    fig, ax = plt.subplots(figsize=(8, 8 * params.height / params.width))
    frames = list(range(0, len(chaser_xy), stride))

    def init():
        return []

    def update(i):
        ax.clear()
        margin = params.boundary_margin
        ax.set_xlim(-margin, params.width + margin)
        ax.set_ylim(params.height + margin, -margin)
        ax.set_aspect("equal")
        ax.add_patch(patches.Rectangle(
            (0, 0), params.width, params.height,
            linewidth=2, edgecolor="black", facecolor="none"
        ))

        chaser = chaser_xy[i]
        target = target_xy[i]
        ax.plot(chaser_xy[:i + 1, 0], chaser_xy[:i + 1, 1], color="red", alpha=0.3)
        ax.plot(target_xy[:i + 1, 0], target_xy[:i + 1, 1], color="blue", alpha=0.3)
        ax.plot(chaser[0], chaser[1], "ro", markersize=12, label="Chaser")
        ax.plot(target[0], target[1], "bo", markersize=8, label="Target")

        # Detection range
        ax.add_patch(patches.Circle(
            chaser, sim.detection.effective_range(sim.chaser),
            linewidth=1, edgecolor="red", facecolor="red", alpha=0.05
        ))
        ax.set_title(f"Frame {i}/{len(chaser_xy) - 1} | {sim.strategy_name}")
        ax.legend(loc="upper right")
        return []

    anim = FuncAnimation(fig, update, init_func=init, frames=frames,
                         interval=50, blit=True, repeat=True)

    writer = PillowWriter(fps=20)
    anim.save(filename, writer=writer)
    plt.close(fig)


@hydra.main(version_base=None, config_name="config")
def main(cfg: ChaseConfig) -> None:
    print(OmegaConf.to_yaml(cfg))

    params, result = params_from_dict({
        "width": cfg.width,
        "height": cfg.height,
        "target_speed": cfg.target_speed,
        "chaser_speed": cfg.chaser_speed,
        "detection_radius": cfg.detection_radius,
        "sensitivity": cfg.sensitivity,
        "capture_distance": cfg.capture_distance,
    })
    if not result.ok:
        raise ValueError("Invalid chase config: " + "; ".join(result.errors))

    key = jax.random.PRNGKey(cfg.seed)
    sim = ChaseSimulation(params, strategy=cfg.strategy, key=key)
    if not sim.set_detection_method(cfg.detection_method):
        log.warning("Falling back to %s detection", sim.detection.method)
    sim.start()

    writer = SummaryWriter(f"runs/{cfg.exp_name}_{cfg.strategy}")
    writer.add_text(
        "hyperparameters",
        "|param|value|\n|-|-|\n" + "\n".join(
            [f"|{key}|{value}|" for key, value in OmegaConf.to_container(cfg).items()]
        ),
    )

    captures = 0
    chaser_xy = target_xy = None
    for attempt in tqdm(range(cfg.num_attempts), desc="Attempts"):
        outcome, chaser_xy, target_xy = record_attempt(sim, cfg.max_frames)
        captured = outcome is Outcome.CAPTURE
        captures += int(captured)

        writer.add_scalar("charts/attempt_frames", sim.frame, attempt)
        writer.add_scalar("charts/captured", int(captured), attempt)
        writer.add_scalar("charts/success_rate", sim.stats.success_rate(), attempt)
        writer.add_scalar("detection/recent_rate", sim.detection.recent_detection_rate(), attempt)

        if attempt < cfg.num_attempts - 1:
            # Fire the pending restart without stepping the new attempt
            sim.scheduler.advance(max(params.capture_delay, params.escape_delay))

    stats = sim.stats.get_stats()
    print(f"\nStrategy: {cfg.strategy}")
    print(f"Captures: {captures}/{cfg.num_attempts}")
    print(f"Success rate: {stats.success_rate:.1f}%")
    capture_frames = [event.frame for event in sim.resolver.recent(Outcome.CAPTURE)]
    if capture_frames:
        print(f"Average frames to capture: {np.mean(capture_frames):.1f}")

    output_dir = os.getcwd()
    if cfg.save_plots and chaser_xy is not None:
        fig = plot_chase(chaser_xy, target_xy, params.width, params.height,
                         f"Last attempt ({cfg.strategy})", params.capture_distance)
        fig.savefig(os.path.join(output_dir, f"chase_{cfg.strategy}.png"))
        plt.close(fig)

    if cfg.save_gif and chaser_xy is not None:
        save_attempt_gif(chaser_xy, target_xy, sim,
                         os.path.join(output_dir, f"chase_{cfg.strategy}.gif"), cfg.gif_stride)

    writer.close()


if __name__ == "__main__":
    main()
