"""Example usage of the chase simulation."""

import logging

import jax
from chasesim import ChaseSimulation, Outcome, SimParams


def main():
    logging.basicConfig(level=logging.WARNING)

    print("=" * 60)
    print("CHASESIM: Pursuit-Evasion Chase Demo")
    print("=" * 60)

    strategies = ["direct", "predictive", "patrol"]
    attempts_per_strategy = 5

    for strategy in strategies:
        print(f"\n--- Testing with {strategy} strategy ---")

        key = jax.random.PRNGKey(42)
        sim = ChaseSimulation(SimParams(), strategy=strategy, key=key)
        sim.start()

        for attempt in range(attempts_per_strategy):
            target = sim.target
            print(f"Attempt {attempt + 1}: target enters from the {target.spawn_edge} edge at {target.position}")

            outcome = sim.run_until_outcome(max_frames=2000)
            if outcome is Outcome.CAPTURE:
                print(f"  Captured after {sim.frame} frames "
                      f"(distance {sim.chaser.distance_to(sim.target):.2f})")
            elif outcome is Outcome.ESCAPE:
                print(f"  Target escaped after {sim.frame} frames")
            else:
                print(f"  No outcome after {sim.frame} frames")

            # Fire the pending restart without stepping the new attempt
            delay = max(sim.params.capture_delay, sim.params.escape_delay)
            sim.scheduler.advance(delay)

        stats = sim.stats.get_stats()
        print(f"Captures: {stats.captures}/{stats.attempts}")
        print(f"Success rate: {stats.success_rate:.1f}%")
        print(f"Detection rate (last 60 frames): {sim.detection.recent_detection_rate():.2f}")

    print("\n" + "=" * 60)
    print("Demo completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
