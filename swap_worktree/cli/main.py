"""Command-line entry point for swap-worktree"""

import sys

from rich.markup import escape

from swap_worktree.cli.args import parse_args
from swap_worktree.config import Config
from swap_worktree.constants import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from swap_worktree.core import SwapOrchestrator
from swap_worktree.exceptions import SwapError
from swap_worktree.logging_config import setup_logging
from swap_worktree.services.display_service import DisplayService, console, error_console
from swap_worktree.services.git import GitBackend


def main(argv=None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    display = DisplayService(verbose=parsed_args.verbose, debug=parsed_args.debug)
    orchestrator = None

    try:
        # Setup logging before any git work
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        config = Config(
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
            include_untracked=not parsed_args.no_untracked,
            restore_index=parsed_args.restore_index,
            stash_message_prefix=parsed_args.stash_prefix,
            dry_run=parsed_args.dry_run,
        )

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        backend = GitBackend()

        if parsed_args.list_branches:
            destination = backend.resolve_worktree(parsed_args.destination_worktree_dir)
            display.display_branches(backend.worktree_branches(destination))
            return EXIT_SUCCESS

        orchestrator = SwapOrchestrator(backend, config)

        if config.dry_run:
            plan = orchestrator.plan(parsed_args.destination_worktree_dir, parsed_args.source_branch_name)
            display.display_plan(plan)
            return EXIT_SUCCESS

        result = orchestrator.swap(parsed_args.destination_worktree_dir, parsed_args.source_branch_name)
        display.display_result(result)
        return result.exit_code
    except SwapError as e:
        display.display_error(e)
        if parsed_args.debug:
            error_console.print_exception()
        return e.exit_code
    except KeyboardInterrupt:
        phase = orchestrator.current_phase.value if orchestrator else "startup"
        display.display_interrupted(phase)
        return EXIT_INTERRUPTED
    except Exception as e:
        error_console.print(f"[red]Error: {escape(str(e))}[/red]")
        if parsed_args.debug:
            error_console.print_exception()
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
