"""
Command-line interface for headless traffic runs.

Usage:
    python -m citysim.traffic
    python -m citysim.traffic ring_road --duration 300 --seed 7 --output ./data/ring_road
    python -m citysim.traffic --occupied-crosswalk main1 --occupied-crosswalk south2
    python -m citysim.traffic --list
"""

if __name__ == '__main__':
    import sys
    import argparse

    parser = argparse.ArgumentParser(
        description="Run the night-city traffic simulation without a renderer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m citysim.traffic
  python -m citysim.traffic ring_road --duration 600 --seed 42
  python -m citysim.traffic --scenario-file my_network.yaml --output ./data/mine
  python -m citysim.traffic --occupied-crosswalk main1
        """)

    parser.add_argument(
        'scenario_name',
        type=str,
        nargs='?',
        default='ring_road',
        help='Scenario under experiments/networks (default: ring_road)'
    )

    parser.add_argument(
        '--scenario-file',
        type=str,
        default=None,
        help='Path to a scenario YAML file (overrides scenario_name)'
    )

    parser.add_argument(
        '--duration',
        type=float,
        default=120.0,
        help='Simulated seconds (default: 120)'
    )

    parser.add_argument(
        '--frame-time',
        type=float,
        default=1.0 / 60.0,
        help='Seconds per frame (default: 1/60)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for a reproducible run'
    )

    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Output directory for CSV files'
    )

    parser.add_argument(
        '--collect-interval',
        type=int,
        default=10,
        help='Collect data every N frames (default: 10)'
    )

    parser.add_argument(
        '--occupied-crosswalk',
        action='append',
        default=[],
        metavar='ID',
        help='Hold a crosswalk occupied for the whole run (repeatable)'
    )

    parser.add_argument(
        '--list',
        action='store_true',
        help='List available scenarios and exit'
    )

    args = parser.parse_args()

    from citysim.scenarios import list_scenarios
    from .runner import run_headless

    if args.list:
        for name in list_scenarios():
            print(name)
        sys.exit(0)

    print(">>> Running headless traffic simulation")
    print(f">>> Scenario: {args.scenario_file or args.scenario_name}")
    print(f">>> Duration: {args.duration}s at {args.frame_time:.4f}s per frame")
    if args.seed is not None:
        print(f">>> Seed: {args.seed}")
    if args.output:
        print(f">>> Output directory: {args.output}")
    print()

    try:
        run_headless(
            scenario_name=args.scenario_name,
            scenario_path=args.scenario_file,
            duration=args.duration,
            frame_time=args.frame_time,
            seed=args.seed,
            collect_interval=args.collect_interval,
            output_dir=args.output,
            occupied_crosswalks=args.occupied_crosswalk,
        )
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
