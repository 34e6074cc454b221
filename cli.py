#!/usr/bin/env python
"""
Build Architect CLI

Command-line interface for inspecting workspace targets and running builders.
"""

import sys
import json
import asyncio
import argparse
from pathlib import Path
import logging
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

# Load .env file to environment variables
# This must be done before settings are read
load_dotenv()

from core.architect import Architect
from core.config_loader import ConfigLoadError, load_workspace, parse_overrides
from core.errors import ArchitectError, format_error_for_cli
from core.result import Err, capture, capture_async
from models.architect_models import BuildEvent, BuilderConfiguration, TargetSpecifier
from utils.logger import setup_logging


# Version
__version__ = "1.0.0"


def print_success(message: str):
    """Print success message"""
    print(f"✓ {message}")


def print_error(message: str):
    """Print error message"""
    print(f"✗ {message}", file=sys.stderr)


def print_info(message: str):
    """Print info message"""
    print(f"ℹ {message}")


def _to_jsonable(event):
    if hasattr(event, 'model_dump'):
        return event.model_dump()
    return event


def _event_succeeded(event) -> bool:
    if isinstance(event, BuildEvent):
        return event.success
    if isinstance(event, dict):
        return bool(event.get('success', True))
    return bool(getattr(event, 'success', True))


async def _load_architect(args) -> Architect:
    workspace = load_workspace(args.workspace)
    architect = Architect(workspace)
    return await architect.load_architect()


def _report(result: Err) -> int:
    """Print an Err result and return the exit code"""
    print_error(format_error_for_cli(result.error))
    return 1


# ==================== Commands ====================

async def cmd_projects(args) -> int:
    """List workspace projects"""
    loaded = await capture_async(_load_architect, args)
    if isinstance(loaded, Err):
        return _report(loaded)

    for project in loaded.value.list_projects():
        print(project)
    return 0


async def cmd_targets(args) -> int:
    """List the targets of a project"""
    loaded = await capture_async(_load_architect, args)
    if isinstance(loaded, Err):
        return _report(loaded)
    architect = loaded.value

    targets = capture(architect.list_project_targets, args.project)
    if isinstance(targets, Err):
        return _report(targets)

    for target in targets.value:
        configurations = architect.list_target_configurations(args.project, target)
        suffix = f" ({', '.join(configurations)})" if configurations else ""
        print(f"{target}{suffix}")
    return 0


async def cmd_config(args) -> int:
    """Print the merged builder configuration of a target"""
    loaded = await capture_async(_load_architect, args)
    if isinstance(loaded, Err):
        return _report(loaded)

    config = capture(_builder_configuration, loaded.value, args)
    if isinstance(config, Err):
        return _report(config)

    print(json.dumps(config.value.model_dump(), indent=2))
    return 0


async def cmd_describe(args) -> int:
    """Print a builder's description and option schema"""
    loaded = await capture_async(_load_architect, args)
    if isinstance(loaded, Err):
        return _report(loaded)

    description = await capture_async(loaded.value.get_builder_description, args.builder)
    if isinstance(description, Err):
        return _report(description)

    print(json.dumps(description.value.model_dump(), indent=2))
    return 0


async def cmd_run(args) -> int:
    """Run a target and print its build events"""
    loaded = await capture_async(_load_architect, args)
    if isinstance(loaded, Err):
        return _report(loaded)
    architect = loaded.value

    config = capture(_builder_configuration, architect, args)
    if isinstance(config, Err):
        return _report(config)

    print_info(f"Running {args.target} with builder {config.value.builder}")

    events = 0
    success = True
    context = {'logger': logging.getLogger(f"builder.{config.value.builder}")}
    try:
        async for event in architect.run(config.value, context):
            events += 1
            success = _event_succeeded(event)
            print(json.dumps(_to_jsonable(event), default=str))
    except ArchitectError as e:
        print_error(format_error_for_cli(e))
        return 1

    if success:
        print_success(f"{args.target} completed ({events} event(s))")
        return 0
    print_error(f"{args.target} failed")
    return 1


def _builder_configuration(architect: Architect, args) -> BuilderConfiguration:
    overrides = parse_overrides(args.override)
    try:
        spec = TargetSpecifier.parse(args.target, overrides)
    except ValueError as e:
        raise ConfigLoadError(str(e))
    return architect.get_builder_configuration(spec)


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description='Build Architect - resolve and run workspace build targets',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  architect targets app
  architect config app:build:production --override outputPath=dist-prod
  architect run app:build:production
  architect describe my-pkg:build
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--workspace', help='Workspace file (default: settings.workspace_file)')
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Logging level'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    projects_parser = subparsers.add_parser('projects', help='List workspace projects')
    projects_parser.set_defaults(func=cmd_projects)

    targets_parser = subparsers.add_parser('targets', help='List the targets of a project')
    targets_parser.add_argument('project', help='Project name')
    targets_parser.set_defaults(func=cmd_targets)

    for name, func, help_text in (
        ('config', cmd_config, 'Print the merged builder configuration'),
        ('run', cmd_run, 'Run a target'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('target', help='project:target[:configuration]')
        sub.add_argument(
            '--override',
            action='append',
            help='Override an option (e.g., outputPath=dist-prod)',
            metavar='KEY=VALUE'
        )
        sub.set_defaults(func=func)

    describe_parser = subparsers.add_parser('describe', help='Describe a builder')
    describe_parser.add_argument('builder', help='package:builder')
    describe_parser.set_defaults(func=cmd_describe)

    # Parse arguments
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level)

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        print()
        print_info("Cancelled by user")
        return 130


if __name__ == '__main__':
    sys.exit(main())
