"""Command line interface for the webform migration."""

import argparse
import json
import logging
import sys

from .models.migration import MigrationConfig, MigrationStatus
from .models.errors import MigrationError
from .services.watermark import WatermarkStore
from .orchestrator import MigrationOrchestrator

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Webform Migration Tool - Move legacy webforms and their submissions to the new form schema"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run migration
    run_parser = subparsers.add_parser("run", help="Run a migration")
    run_parser.add_argument("--config", required=True, help="Path to migration config file")
    run_parser.add_argument("--form", type=int, help="Only migrate the webform with this legacy id")
    run_parser.add_argument("--simulate", action="store_true", help="Assemble and report without writing")
    run_parser.add_argument(
        "--max-submissions", type=int,
        help="Submissions to import per form (0 disables submissions)"
    )
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Preview one form
    preview_parser = subparsers.add_parser("preview", help="Print the assembled structure of one form")
    preview_parser.add_argument("--config", required=True, help="Path to migration config file")
    preview_parser.add_argument("--form", type=int, required=True, help="Legacy webform id")
    preview_parser.add_argument("--output", help="Output file path")
    preview_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Watermark
    watermark_parser = subparsers.add_parser("watermark", help="Show or set the last imported submission id")
    watermark_parser.add_argument("--config", required=True, help="Path to migration config file")
    watermark_parser.add_argument("--set", type=int, dest="value", help="New last imported submission id")

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.command == "run":
        return run_migration(args)
    elif args.command == "preview":
        return run_preview(args)
    elif args.command == "watermark":
        return run_watermark(args)
    else:
        parser.print_help()
        return 1


def load_config(args) -> MigrationConfig:
    """Load the config file and apply command line overrides."""
    config = MigrationConfig.from_json_file(args.config)

    if getattr(args, "form", None) is not None:
        config.form_identifier = args.form
    if getattr(args, "simulate", False):
        config.simulate = True
    if getattr(args, "max_submissions", None) is not None:
        config.max_submissions = args.max_submissions

    return config


def run_migration(args) -> int:
    """Run a migration from config file."""
    config = load_config(args)

    orchestrator = MigrationOrchestrator(config)
    try:
        result = orchestrator.run_migration()
    finally:
        orchestrator.close()

    print("\n" + "=" * 60)
    print("SIMULATION COMPLETE" if config.simulate else "MIGRATION COMPLETE")
    print("=" * 60)
    print(f"Status: {result.status.value}")
    print(f"Forms: {result.total_forms} ({result.total_forms_failed} failed)")
    print(f"Submissions Processed: {result.total_submissions_processed}")
    print(f"Succeeded: {result.total_submissions_succeeded}")
    print(f"Failed: {result.total_submissions_failed}")
    print(f"Watermark: {result.watermark_before} -> {result.watermark_after}")
    if result.duration_seconds:
        print(f"Duration: {result.duration_seconds:.2f} seconds")

    errors = orchestrator.error_summary()
    if errors:
        print(f"\nErrors ({len(errors)}):")
        for error in errors:
            print(f"  - {error}")
    else:
        print("\nNo errors during import!")

    return 1 if result.status == MigrationStatus.FAILED else 0


def run_preview(args) -> int:
    """Print the assembled form."""
    config = load_config(args)

    orchestrator = MigrationOrchestrator(config)
    try:
        assembled = orchestrator.preview_form(args.form)
    except MigrationError as e:
        print(f"Preview failed: {e}", file=sys.stderr)
        return 1
    finally:
        orchestrator.close()

    output = assembled.to_dict()
    if args.output:
        with open(args.output, 'w') as f:
            json.dump(output, f, indent=2, default=str)
        print(f"Assembled form saved to {args.output}")
    else:
        print(json.dumps(output, indent=2, default=str))
    return 0


def run_watermark(args) -> int:
    """Show or set the watermark."""
    config = MigrationConfig.from_json_file(args.config)
    store = WatermarkStore(config.state_file)

    if args.value is not None:
        store.write(args.value)

    print(f"Last imported submission id: {store.read()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
