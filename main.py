#!/usr/bin/env python3
"""Main entry point for Workout Mapper application."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config import settings
from analyzers.workout_summary import SORT_FIELDS, sort_workouts, summarize
from maps.collaborators import InMemoryMap, StaticGeolocation
from maps.marker_registry import MarkerRegistry
from models.errors import NotFoundError, PersistenceError, ValidationError
from models.workout import CYCLING, RUNNING
from storage.snapshot import SnapshotStore
from storage.workout_store import WorkoutStore
from sync.orchestrator import WorkoutOrchestrator
from visualizers.report_generator import ReportGenerator


def setup_logging(verbose: bool = False):
    """Set up logging configuration.

    Args:
        verbose: Enable verbose logging
    """
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for CLI commands."""
    parser = argparse.ArgumentParser(
        description='Log runs and rides on a map and keep them across restarts',
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=(
            'Examples:\n'
            '  %(prog)s log running --lat 51.5 --lng -0.1 --distance 5 --duration 30 --cadence 180\n'
            '  %(prog)s log cycling --lat 51.5 --lng -0.1 --distance 20 --duration 60 --elevation 150\n'
            '  %(prog)s list --sort-by distance --format html\n'
            '  %(prog)s remove id3f2a9c\n'
            '  %(prog)s clear\n'
            '  %(prog)s config --show'
        )
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--snapshot', type=str, help=f'Snapshot file (default: {settings.SNAPSHOT_FILE})'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Log command
    log_parser = subparsers.add_parser('log', help='Log a new workout at a map position')
    log_kinds = log_parser.add_subparsers(dest='kind', help='Workout type')
    for kind, variant_flag, variant_help in (
        (RUNNING, '--cadence', 'Cadence (steps/min)'),
        (CYCLING, '--elevation', 'Elevation gain (m), may be negative'),
    ):
        kind_parser = log_kinds.add_parser(kind, help=f'Log a {kind} workout')
        kind_parser.add_argument('--lat', type=float, required=True, help='Latitude')
        kind_parser.add_argument('--lng', type=float, required=True, help='Longitude')
        kind_parser.add_argument('--distance', type=float, required=True, help='Distance (km)')
        kind_parser.add_argument('--duration', type=float, required=True, help='Duration (min)')
        kind_parser.add_argument(variant_flag, dest='variant_value', type=float, required=True,
                                 help=variant_help)

    # Remove command
    remove_parser = subparsers.add_parser('remove', help='Remove a workout by id')
    remove_parser.add_argument('workout_id', help='Workout id')

    # Clear command
    subparsers.add_parser('clear', help='Remove every workout')

    # List command
    list_parser = subparsers.add_parser('list', help='Show logged workouts')
    list_parser.add_argument(
        '--sort-by', choices=sorted(SORT_FIELDS), default='date', help='Sort field (default: date)'
    )
    list_parser.add_argument(
        '--ascending', action='store_true', help='Oldest/smallest first (default: newest first)'
    )
    list_parser.add_argument(
        '--format', choices=['markdown', 'html'], default=settings.DEFAULT_LIST_FORMAT, help='Output format'
    )
    list_parser.add_argument(
        '--summary', action='store_true', help='Append totals'
    )
    list_parser.add_argument(
        '--output', '-o', type=str, help='Write the list to this file instead of stdout'
    )

    # Summary command
    subparsers.add_parser('summary', help='Print totals as JSON')

    # Focus command
    focus_parser = subparsers.add_parser('focus', help='Center the map on a workout')
    focus_parser.add_argument('workout_id', help='Workout id')

    # Locate command
    subparsers.add_parser('locate', help='Center the map on the current position')

    # Config command
    config_parser = subparsers.add_parser('config', help='Manage configuration')
    config_parser.add_argument(
        '--show', action='store_true', help='Show current configuration'
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return create_parser().parse_args(argv)


class WorkoutMapper:
    """Main application class."""

    def __init__(self, snapshot_file: Optional[Path] = None):
        """Initialize the mapper and restore saved workouts.

        Args:
            snapshot_file: Snapshot path, defaults to ``settings.SNAPSHOT_FILE``
        """
        self.settings = settings
        self.map_view = InMemoryMap()
        self.orchestrator = WorkoutOrchestrator(
            store=WorkoutStore(),
            markers=MarkerRegistry(self.map_view),
            snapshots=SnapshotStore(snapshot_file or settings.SNAPSHOT_FILE),
            map_view=self.map_view,
        )
        self.report_generator = ReportGenerator()
        self.orchestrator.rehydrate()

    def log_workout(self, args: argparse.Namespace) -> str:
        workout_id = self.orchestrator.log_workout(
            args.kind,
            (args.lat, args.lng),
            args.distance,
            args.duration,
            args.variant_value,
        )
        workout = self.orchestrator.find(workout_id)
        print(f"{workout.description}: {workout.derived_metric:.1f} {workout.metric_unit} [{workout_id}]")
        return workout_id

    def list_workouts(self, args: argparse.Namespace) -> str:
        workouts = sort_workouts(self.orchestrator.workouts, args.sort_by, descending=not args.ascending)
        summary = summarize(workouts) if args.summary else None
        content = self.report_generator.generate_workout_list(workouts, format=args.format, summary=summary)

        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding='utf-8')
            logging.info(f"Workout list saved to: {output_path}")
        else:
            print(content)
        return content

    def focus(self, workout_id: str):
        workout = self.orchestrator.focus_workout(workout_id)
        coords, zoom = self.map_view.view
        print(f"{workout.description}: {coords.lat:.5f}, {coords.lng:.5f} (zoom {zoom})")

    def locate(self):
        coords = asyncio.run(self.orchestrator.center_on_current_position(StaticGeolocation()))
        if coords is None:
            print("Current position unavailable")
        else:
            print(f"Map centered on {coords.lat:.5f}, {coords.lng:.5f}")
        return coords

    def show_config(self):
        """Display current configuration."""
        print("Current Configuration:")
        print("-" * 30)
        config_dict = {
            'SNAPSHOT_FILE': self.orchestrator.snapshots.path,
            'DATA_DIR': self.settings.DATA_DIR,
            'MAP_ZOOM_LEVEL': self.settings.MAP_ZOOM_LEVEL,
            'SKIP_CORRUPT_RECORDS': self.settings.SKIP_CORRUPT_RECORDS,
            'LOG_LEVEL': self.settings.LOG_LEVEL,
            'LOG_FILE': self.settings.LOG_FILE,
        }
        for key, value in config_dict.items():
            print(f"{key}: {value}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    try:
        mapper = WorkoutMapper(Path(args.snapshot) if args.snapshot else None)

        if args.command == 'log':
            if not args.kind:
                logging.error("Please specify a workout type: running or cycling.")
                return 2
            mapper.log_workout(args)

        elif args.command == 'remove':
            workout = mapper.orchestrator.remove_workout(args.workout_id)
            print(f"Removed {workout.description} [{workout.id}]")

        elif args.command == 'clear':
            mapper.orchestrator.clear_all()
            print("All workouts removed")

        elif args.command == 'list':
            mapper.list_workouts(args)

        elif args.command == 'summary':
            print(json.dumps(summarize(mapper.orchestrator.workouts), indent=2, ensure_ascii=False))

        elif args.command == 'focus':
            mapper.focus(args.workout_id)

        elif args.command == 'locate':
            mapper.locate()

        elif args.command == 'config':
            mapper.show_config()

    except ValidationError as e:
        logging.error(f"{e}")
        return 2
    except NotFoundError as e:
        logging.warning(f"{e}")
        return 1
    except PersistenceError as e:
        logging.warning(f"Change applied but not saved: {e}")
        return 1
    except Exception as e:
        logging.error(f"Error: {e}")
        if args.verbose:
            logging.exception("Full traceback:")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
