"""
Study 01: Threat Patrol Observation

Run: python -m crow_eye.studies.01_threat_patrol.observe

Watch a flock search, gather and vote.
"""

import argparse
import logging

from crow_eye.config import SimulationConfig, load_config
from crow_eye.data.loader import load_threats
from crow_eye.environments.threat_field import ThreatField
from crow_eye.observations.report import format_step
from crow_eye.observations.visualize import SwarmVisualizer

logger = logging.getLogger(__name__)


def notify_rangers(decision: bool) -> None:
    if decision:
        logger.info("Escalation sent to rangers")


def run_study(config: SimulationConfig, animate: bool = False) -> ThreatField:
    """Run a threat patrol and print every tick."""
    print("=" * 50)
    print("Crow Eye Threat Detection Simulation")
    print("=" * 50)

    threats = load_threats(config.threats_path)
    print(f"Loaded {len(threats)} threats")

    field = ThreatField(
        threats,
        config=config.environment,
        crow_config=config.crow,
        fractal_config=config.fractal,
        voter_config=config.voter,
        escalation_sink=notify_rangers,
        seed=config.seed,
    )
    field.populate(config.num_crows)
    print(f"Initialized swarm of {len(field.crows)} crows")

    viz = SwarmVisualizer(field) if animate else None
    try:
        for _ in range(config.steps):
            report = field.step()
            print()
            print("\n".join(format_step(report)))
            if viz is not None:
                viz.render()
    finally:
        if viz is not None:
            viz.close()

    print("\n" + "=" * 50)
    print("Simulation complete.")
    print("=" * 50)
    return field


def main():
    parser = argparse.ArgumentParser(description="Threat Patrol Study")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML config (defaults to the packaged one)")
    parser.add_argument("--steps", type=int, default=None)
    parser.add_argument("--crows", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--threats", type=str, default=None)
    parser.add_argument("--animate", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    config = load_config(args.config)
    if args.steps is not None:
        config.steps = args.steps
    if args.crows is not None:
        config.num_crows = args.crows
    if args.seed is not None:
        config.seed = args.seed
    if args.threats is not None:
        config.threats_path = args.threats
    config.validate()

    run_study(config, animate=args.animate)


if __name__ == "__main__":
    main()
