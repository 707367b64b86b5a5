from argparse import ArgumentParser

from citysim import list_scenarios, run_headless


def generate_dataset(scenario_name: str, seed: int | None = None):
    # Basic data collection for the specified scenario
    # Collects vehicle and simulation data and exports to CSV files
    result = run_headless(
        scenario_name=scenario_name,
        duration=600.0,  # Ten simulated minutes (adjust as needed)
        seed=seed,
        collect_interval=10,  # Collect data every 10th frame
        output_dir=f"./data/{scenario_name}",
        enable_data_collection=True,
    )

    # Access collected data
    if result:
        print("\n=== Data Collection Summary ===")
        print(f"Vehicle data points: {len(result['data']['vehicles'])}")
        print(f"Simulation data points: {len(result['data']['simulation'])}")

        # Access metrics
        metrics = result["metrics"]
        print(f"\nThroughput: {metrics.get('throughput', 0):.0f} vehicles")
        print(
            "Average waiting time: "
            f"{metrics.get('average_waiting_time', 0):.2f}s"
        )

        # Final population
        simulator = result["simulator"]
        print(f"\nVehicles alive at the end: {len(simulator.agents)}")

        print(f"\n=== All data exported to: ./data/{scenario_name}/ ===")


def main():
    parser = ArgumentParser(description="Run night-city traffic scenarios")
    parser.add_argument(
        "--generate-dataset",
        type=str,
        help="Scenario name to collect a dataset for",
    )
    parser.add_argument(
        "--scenario",
        type=str,
        choices=list_scenarios(),
        default="ring_road",
        help="Scenario name",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=120.0,
        help="Simulated seconds",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed",
    )

    args = parser.parse_args()
    if args.generate_dataset:
        print("Generating dataset...")
        generate_dataset(args.generate_dataset, seed=args.seed)
        return

    run_headless(args.scenario, duration=args.duration, seed=args.seed)


if __name__ == "__main__":
    main()
