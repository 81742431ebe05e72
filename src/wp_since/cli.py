"""Command-line interface for wp-since."""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from .config import DEFAULT_CONFIG_PATH, load_config
from .importing import DocImporter, ImportEvents
from .indexing import ChangeIndexBuilder, DeprecationTagger
from .models import PostType
from .reporting import ReportGenerator
from .storage import DocStore
from .utils import ConfigurationError, StorageError, WpSinceError, format_user_error, handle_operation_error
from .versions import VersionResolver

logger = logging.getLogger(__name__)

CHANGE_TYPE_CHOICES = ["any", "introduced", "modified", "deprecated"]
POST_TYPE_CHOICES = ["any"] + [pt.value for pt in PostType] + [f"wp-parser-{pt.value}" for pt in PostType]


class WpSinceCLI:
    """Command-line interface for listing the changes in a release."""

    def __init__(self):
        """Initialize the CLI."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="wp-since",
            description="List changes in a WordPress version",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Record the active theme on a new store and import parsed docs
  wp-since init
  wp-since import parsed.yaml --version 4.9.0

  # List all changes in the current version
  wp-since since

  # List changes introduced in version x.y.z
  wp-since since x.y.z --change_type=introduced

  # List all changes to hooks in version x.y.z
  wp-since since x.y.z --post_type=hook
            """
        )

        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose output"
        )

        parser.add_argument(
            "--config",
            type=str,
            default=None,
            help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})"
        )

        parser.add_argument(
            "--database",
            type=str,
            default=None,
            help="Path to the documentation database (overrides the config file)"
        )

        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        since_parser = subparsers.add_parser("since", help="List changes in a version")
        since_parser.add_argument("version", nargs="?", default=None,
                                  help="Version to list changes for (default: the current version)")
        since_parser.add_argument("--change_type", "--change-type", dest="change_type", default="any",
                                  choices=CHANGE_TYPE_CHOICES, help="Type of change to list")
        since_parser.add_argument("--post_type", "--post-type", dest="post_type", default="any",
                                  choices=POST_TYPE_CHOICES, help="Post type to list changes for")
        since_parser.add_argument("--format", dest="output_format", default=None,
                                  choices=["text", "markdown"], help="Output format")

        import_parser = subparsers.add_parser("import", help="Import parsed documentation")
        import_parser.add_argument("file", help="YAML or JSON file of parsed entries")
        import_parser.add_argument("--version", dest="import_version", default=None,
                                   help="Version the import represents (default: highest since version)")

        subparsers.add_parser("rebuild-index", help="Rebuild the per-version change index")

        init_parser = subparsers.add_parser("init", help="Initialize a documentation store")
        init_parser.add_argument("--theme", default=None,
                                 help="Active theme to record (default: the required theme)")

        return parser

    def run(self, args: Optional[List[str]] = None) -> int:
        """Run the CLI with given arguments.

        Args:
            args: Command line arguments (defaults to sys.argv)

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        parsed_args = self.parser.parse_args(args)

        if parsed_args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            config = load_config(parsed_args.config)
            if parsed_args.database:
                config["storage"]["database"] = parsed_args.database

            handler_name = f"_handle_{parsed_args.command.replace('-', '_')}"
            handler = getattr(self, handler_name)

            if parsed_args.command == "init":
                return handler(parsed_args, config)

            store = self._open_store(config)
            self._check_host(store, config)
            return handler(parsed_args, config, store)

        except WpSinceError as e:
            for message in e.messages:
                print(format_user_error(message), file=sys.stderr)
            return 1
        except Exception as e:
            error = handle_operation_error(f"Command '{parsed_args.command}'", e, logger)
            logger.error(error.message)
            if parsed_args.verbose:
                import traceback
                traceback.print_exc()
            return 1

    def _open_store(self, config: Dict[str, Any]) -> DocStore:
        db_path = Path(config["storage"]["database"])
        if not db_path.exists():
            raise StorageError(f"Documentation store not found: {db_path}", "Run 'wp-since init' first")
        return DocStore(str(db_path))

    def _check_host(self, store: DocStore, config: Dict[str, Any]):
        """Refuse to run unless the required theme is active."""
        required = config["host"]["required_theme"]
        active = store.get_option("template")
        if active != required:
            raise ConfigurationError(f"The {required} theme must be active (active theme: {active or 'none'})")

    def _handle_init(self, args, config) -> int:
        """Handle init command."""
        theme = args.theme or config["host"]["required_theme"]
        store = DocStore(config["storage"]["database"])
        store.set_option("template", theme)

        print(f"Initialized documentation store {store.db_path} (theme: {theme})")
        return 0

    def _handle_since(self, args, config, store) -> int:
        """Handle since command."""
        resolution = VersionResolver(store).resolve(args.version)
        if not resolution.ok:
            for message in resolution.messages:
                print(format_user_error(message), file=sys.stderr)
            return 1

        generator = ReportGenerator(store, ticket_url=config["report"]["ticket_url"])
        report = generator.generate_report(
            resolution.value,
            change_type=args.change_type,
            post_type=args.post_type,
            output_format=args.output_format or config["report"]["default_format"],
        )
        if not report.ok:
            for message in report.messages:
                print(format_user_error(message), file=sys.stderr)
            return 1

        sys.stdout.write(report.value)
        return 0

    def _handle_import(self, args, config, store) -> int:
        """Handle import command."""
        events = ImportEvents()
        DeprecationTagger(store).register(events)

        summary = DocImporter(store, events).import_file(args.file, version=args.import_version)
        stats = store.get_statistics()

        print(f"Imported {summary['imported']} entries (version: {summary['version'] or 'unknown'})")
        print(f"Store now holds {stats['total_entries']} entries")
        return 0

    def _handle_rebuild_index(self, args, config, store) -> int:
        """Handle rebuild-index command."""
        stats = ChangeIndexBuilder(store).rebuild_change_index()

        print(f"Rebuilt change index for {stats['versions']} versions")
        print(f"  Entries classified: {stats['classified']}")
        print(f"  Entries skipped: {stats['skipped']}")
        return 0


def main():
    """Main entry point for the CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    cli = WpSinceCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
