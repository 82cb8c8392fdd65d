"""
Command Line Interface using Fire - run kitchen simulations from problem files
"""
import fire
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from config import Config, load_settings
from kitchen.engine import KitchenEngine
from metrics.collector import MetricsCollector
from models.models import Problem, Solution
from scenarios.executor import ScenarioConfig, ScenarioExecutor

logger = logging.getLogger(__name__)

__version__ = "1.0.0"


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


class KitchenCLI:
    """Command-line interface for the kitchen storage simulation"""

    def __init__(self, config_path: str = "configs/config.yaml"):
        """Initialize CLI with configuration"""
        self.config_path = Path(config_path)
        self.config: Config = load_settings(self.config_path)
        configure_logging(self.config.log_level)
        self.metrics_collector = MetricsCollector(str(self.config.metrics_dir))

    def simulate(
        self,
        problem_file: str,
        output: str = "",
        rate_ms: Optional[int] = None,
        pickup_min_s: Optional[float] = None,
        pickup_max_s: Optional[float] = None,
        seed: Optional[int] = None,
        export_csv: bool = False,
    ) -> None:
        """Run a problem through the kitchen

        Args:
            problem_file: JSON file with the orders to place
            output: Where to write the solution JSON (skipped if empty)
            rate_ms: Milliseconds between placements (defaults to settings)
            pickup_min_s: Earliest pickup delay in seconds (defaults to settings)
            pickup_max_s: Latest pickup delay in seconds (defaults to settings)
            seed: Seed for pickup delays, 0 for random (defaults to settings)
            export_csv: Also export the action log as CSV
        """
        overrides = {
            key: value
            for key, value in {
                "rate_ms": rate_ms,
                "pickup_min_s": pickup_min_s,
                "pickup_max_s": pickup_max_s,
                "seed": seed,
            }.items()
            if value is not None
        }
        simulation = self.config.simulation.model_copy(update=overrides)

        problem = Problem.from_file(problem_file)
        orders = problem.to_domain()

        logger.info("=====")
        logger.info(f"Problem ID: {problem.test_id}")
        logger.info(f"Incoming Orders: {len(orders)}")
        logger.info("=====")

        engine = KitchenEngine(settings=self.config)
        executor = ScenarioExecutor(engine, ScenarioConfig.from_settings(simulation))
        result = executor.run(orders)

        summary = self.metrics_collector.summarize(result.actions)
        summary["orders_rejected"] = len(result.orders_rejected)
        summary["engine_metrics"] = result.metrics

        if output:
            solution = Solution.from_run(
                problem.test_id,
                result.actions,
                rate_ms=simulation.rate_ms,
                pickup_min_s=simulation.pickup_min_s,
                pickup_max_s=simulation.pickup_max_s,
            )
            solution.write(output)

        if export_csv:
            self.metrics_collector.export_to_csv(result.actions, name=f"actions_{problem.test_id}")
            self.metrics_collector.export_summary(summary, name=f"summary_{problem.test_id}")

        print(json.dumps(summary, indent=2, default=str))

    def show_config(self) -> None:
        """Show the effective configuration"""
        print(json.dumps(self.config.model_dump(mode="json"), indent=2))

    def version(self) -> None:
        """Show version information"""
        print("Kitchen Storage Simulation")
        print(f"Version: {__version__}")


def main():
    """Main CLI entry point"""
    if len(sys.argv) > 1 and sys.argv[1].endswith('.yaml'):
        config_path = sys.argv[1]
        sys.argv = [sys.argv[0]] + sys.argv[2:]  # Remove config from args
    else:
        config_path = "configs/config.yaml"

    try:
        cli = KitchenCLI(config_path)
        fire.Fire(cli)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
