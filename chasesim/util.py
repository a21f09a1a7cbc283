import matplotlib.pyplot as plt
import numpy as np


def plot_chase(chaser_xy, target_xy, width, height, title, capture_distance=None):
    """Plot chaser and target trajectories over the arena.

    Args:
        chaser_xy: Array of shape (T, 2) with chaser positions
        target_xy: Array of shape (T, 2) with target positions
        width: Arena width
        height: Arena height
        title: Figure title
        capture_distance: If given, draw the capture circle at the final chaser position

    Returns:
        Matplotlib figure
    """
    chaser_xy = np.asarray(chaser_xy)
    target_xy = np.asarray(target_xy)

    fig, ax = plt.subplots(figsize=(10, 10 * height / width))
    ax.set_title(title)

    # Arena outline
    ax.plot([0, width, width, 0, 0], [0, 0, height, height, 0], color="black", linewidth=1)

    ax.plot(chaser_xy[:, 0], chaser_xy[:, 1], color="red", alpha=0.6, label="Chaser")
    ax.plot(target_xy[:, 0], target_xy[:, 1], color="blue", alpha=0.6, label="Target")
    ax.scatter(chaser_xy[0, 0], chaser_xy[0, 1], color="red", marker="o", s=60)
    ax.scatter(target_xy[0, 0], target_xy[0, 1], color="blue", marker="o", s=60)
    ax.scatter(chaser_xy[-1, 0], chaser_xy[-1, 1], color="red", marker="x", s=100)
    ax.scatter(target_xy[-1, 0], target_xy[-1, 1], color="blue", marker="x", s=100)

    if capture_distance is not None:
        circle = plt.Circle(
            (chaser_xy[-1, 0], chaser_xy[-1, 1]),
            capture_distance,
            color="red",
            fill=False,
            linestyle="--",
            alpha=0.5,
        )
        ax.add_patch(circle)

    padding = 0.1 * max(width, height)
    ax.set_xlim(-padding, width + padding)
    # Screen coordinates: y grows downwards
    ax.set_ylim(height + padding, -padding)

    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.legend()
    ax.grid(True, alpha=0.3)
    ax.set_aspect("equal")

    plt.tight_layout()
    return fig
