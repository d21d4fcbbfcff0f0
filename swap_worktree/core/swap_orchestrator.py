"""Swap orchestration: exchange branches and uncommitted work between two worktrees"""

from typing import List, Optional, Tuple, Union

from swap_worktree.config import Config
from swap_worktree.exceptions import (
    CaptureError,
    CheckoutError,
    DetachError,
    GitOperationError,
    InconsistentStateError,
    PreconditionError,
    RestoreConflictError,
    StashDropError,
)
from swap_worktree.formatters import format_recovery_commands, format_worktree_state
from swap_worktree.logging_config import get_logger
from swap_worktree.models.swap import (
    RestoreOutcome,
    RestoreStatus,
    StashCapture,
    SwapPhase,
    SwapPlan,
    SwapResult,
)
from swap_worktree.models.worktree import BranchLocation, LocationState, WorktreeRef
from swap_worktree.services.git.backend import RepoBackend
from swap_worktree.services.git.worktrees import find_worktree_for_branch

logger = get_logger(__name__)

CapturePair = Tuple[StashCapture, StashCapture]


class SwapOrchestrator:
    """Swaps the branches, and the uncommitted work on them, of two worktrees.

    The destination worktree is named by path, the source by the branch it
    has checked out. A swap runs five phases in order:

    1. resolve: build a validated SwapPlan; nothing is changed
    2. capture: stash each dirty worktree, untracked files included
    3. detach: detach both worktrees so either branch can move
    4. exchange: check out each branch in the other worktree
    5. restore: apply each stash in the worktree its branch moved to

    Failures before the exchange completes are rolled back, and the
    captured stashes are put back where they came from. A stash that cannot
    be applied is never dropped.
    """

    def __init__(self, backend: RepoBackend, config: Union[Config, dict, None] = None):
        """Initialize the orchestrator.

        Args:
            backend: Version-control primitives
            config: Configuration dict or Config object
        """
        self.backend = backend
        if config is None:
            self.config = Config()
        elif isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.current_phase = SwapPhase.RESOLVE

    # Phase 1 - Resolve

    def locate_branch(self, branch: str, destination: WorktreeRef) -> BranchLocation:
        """Find the worktree of the destination's repository hosting ``branch``."""
        worktrees = self.backend.list_worktrees(destination)
        host = find_worktree_for_branch(worktrees, branch)
        if host is None:
            return BranchLocation(branch, LocationState.NOT_CHECKED_OUT)
        if host.path == destination.path:
            return BranchLocation(branch, LocationState.IN_DESTINATION, host)
        return BranchLocation(branch, LocationState.FOUND, host)

    def plan(self, destination_path: str, source_branch: str) -> SwapPlan:
        """Resolve and validate a swap without changing anything.

        Raises:
            PreconditionError: If the invocation cannot be carried out
        """
        self.current_phase = SwapPhase.RESOLVE
        source_branch = (source_branch or "").strip()
        if not source_branch:
            raise PreconditionError("Source branch name cannot be empty.")

        try:
            destination = self.backend.resolve_worktree(destination_path)
        except GitOperationError as e:
            raise PreconditionError(e.message or str(e)) from e

        try:
            logger.debug(f"Operating in repository: {self.backend.repository_root(destination)}")
        except GitOperationError as e:
            logger.debug(f"Could not determine repository root: {e}")

        logger.info(f"Step 1: Fetching branch for destination directory '{destination.path}'...")
        destination_branch = destination.current_branch
        if destination_branch is None:
            raise PreconditionError(
                f"Destination worktree '{destination.path}' is in detached HEAD state. "
                f"Check out a branch there first."
            )
        logger.info(f"Found destination branch: '{destination_branch}'")

        logger.info(f"Step 2: Fetching directory for source branch '{source_branch}'...")
        try:
            location = self.locate_branch(source_branch, destination)
        except GitOperationError as e:
            raise PreconditionError(f"Failed to list worktrees: {e}") from e

        if location.state == LocationState.NOT_CHECKED_OUT:
            raise PreconditionError(f"Could not find worktree for branch '{source_branch}'.")
        if location.state == LocationState.IN_DESTINATION:
            raise PreconditionError(
                f"Branch '{source_branch}' is already checked out in '{destination.path}'. "
                f"Source and destination are the same worktree; nothing to swap."
            )
        if location.worktree.is_orphaned:
            raise PreconditionError(
                f"Source directory '{location.worktree.path}' (for branch '{source_branch}') "
                f"does not exist."
            )

        try:
            source = self.backend.resolve_worktree(location.worktree.path)
        except GitOperationError as e:
            raise PreconditionError(e.message or str(e)) from e
        if source.path == destination.path:
            raise PreconditionError(
                "Source and destination directories are the same. Nothing to swap."
            )
        if source.current_branch != source_branch:
            raise PreconditionError(
                f"Worktree '{source.path}' is no longer on branch '{source_branch}'."
            )
        if destination_branch == source_branch:
            raise PreconditionError(
                f"Destination and source are both on branch '{source_branch}'. Nothing to swap."
            )
        logger.info(f"Found source directory: '{source.path}'")

        return SwapPlan(
            destination=destination,
            source=source,
            destination_branch=destination_branch,
            source_branch=source_branch,
        )

    # Phase 2 - Capture

    def _capture_worktree(self, worktree: WorktreeRef, branch: str) -> StashCapture:
        capture = StashCapture(worktree_path=worktree.path, branch=branch)
        if not self.backend.is_dirty(worktree):
            logger.info(f"No changes to stash in '{worktree.path}'.")
            return capture

        logger.info(f"Stashing '{worktree.path}' (Branch: {branch})...")
        message = self.config.stash_message(branch)
        capture.stash_hash = self.backend.create_stash(
            worktree, message, include_untracked=self.config.include_untracked
        )
        if capture.captured:
            capture.message = message
            logger.info(f"Stashed changes from '{worktree.path}' as {capture.stash_hash}.")
        return capture

    def _capture(self, plan: SwapPlan) -> CapturePair:
        self.current_phase = SwapPhase.CAPTURE
        logger.info("Step 3: Stashing changes in both worktrees...")
        captures: List[StashCapture] = []
        for worktree, branch in (
            (plan.destination, plan.destination_branch),
            (plan.source, plan.source_branch),
        ):
            try:
                captures.append(self._capture_worktree(worktree, branch))
            except GitOperationError as e:
                pending = self._restore_in_place(plan, captures)
                raise CaptureError(
                    f"Failed to create stash in '{worktree.path}': {e}",
                    worktree.path,
                    pending,
                ) from e
        return captures[0], captures[1]

    # Phase 3 - Detach

    def _detach(self, plan: SwapPlan, captures: CapturePair) -> None:
        self.current_phase = SwapPhase.DETACH
        logger.info("Step 4: Swapping branches between worktrees...")

        logger.info(
            f"Detaching HEAD in '{plan.destination.path}' (freeing {plan.destination_branch})..."
        )
        try:
            self.backend.detach(plan.destination)
        except GitOperationError as e:
            pending = self._restore_in_place(plan, captures)
            raise DetachError(
                f"Failed to detach destination worktree '{plan.destination.path}': {e}",
                pending,
            ) from e

        logger.info(f"Detaching HEAD in '{plan.source.path}' (freeing {plan.source_branch})...")
        try:
            self.backend.detach(plan.source)
        except GitOperationError as e:
            failure = f"Failed to detach source worktree '{plan.source.path}': {e}"
            logger.warning(
                f"{failure}\nAttempting to restore '{plan.destination.path}' "
                f"to '{plan.destination_branch}'..."
            )
            try:
                self.backend.checkout_branch(plan.destination, plan.destination_branch)
            except GitOperationError as rollback_error:
                raise self._inconsistent_state(
                    plan, captures, f"{failure}\nRollback failed: {rollback_error}"
                ) from rollback_error
            pending = self._restore_in_place(plan, captures)
            raise DetachError(f"{failure}\nBranch assignment was restored.", pending) from e
        logger.info("Both worktrees detached. Proceeding with swap.")

    # Phase 4 - Exchange

    def _exchange(self, plan: SwapPlan, captures: CapturePair) -> None:
        self.current_phase = SwapPhase.EXCHANGE
        for worktree, branch in (
            (plan.destination, plan.source_branch),
            (plan.source, plan.destination_branch),
        ):
            logger.info(f"Switching '{worktree.path}' -> to '{branch}'...")
            try:
                self.backend.checkout_branch(worktree, branch)
            except GitOperationError as e:
                self._rollback_exchange(
                    plan, captures, f"Failed to check out '{branch}' in '{worktree.path}': {e}", e
                )

        logger.info("Branch swap successful.")
        logger.info(f"  '{plan.destination.path}' is now on branch '{plan.source_branch}'.")
        logger.info(f"  '{plan.source.path}' is now on branch '{plan.destination_branch}'.")

    def _rollback_exchange(
        self, plan: SwapPlan, captures: CapturePair, failure: str, error: Exception
    ) -> None:
        """Put both worktrees back on their original branches, then raise."""
        logger.warning(f"{failure}\nRolling back branch assignment...")
        # Destination first: it may hold the source branch, which frees it
        for worktree, branch in (
            (plan.destination, plan.destination_branch),
            (plan.source, plan.source_branch),
        ):
            try:
                self.backend.checkout_branch(worktree, branch)
            except GitOperationError as rollback_error:
                raise self._inconsistent_state(
                    plan, captures, f"{failure}\nRollback failed: {rollback_error}"
                ) from rollback_error

        pending = self._restore_in_place(plan, captures)
        raise CheckoutError(f"{failure}\nBranch assignment was rolled back.", pending) from error

    def _describe_current_state(self, plan: SwapPlan) -> List[WorktreeRef]:
        """Re-read what each worktree holds right now."""
        state = []
        for worktree in (plan.destination, plan.source):
            current = WorktreeRef(path=worktree.path, current_branch=None)
            try:
                current.current_branch = self.backend.current_branch(worktree)
                current.commit_sha = self.backend.head_commit(worktree)
            except GitOperationError as e:
                logger.warning(f"Could not read the state of '{worktree.path}': {e}")
            state.append(current)
        return state

    def _inconsistent_state(
        self, plan: SwapPlan, captures: CapturePair, failure: str
    ) -> InconsistentStateError:
        pending = [capture for capture in captures if capture.captured]
        state = self._describe_current_state(plan)
        commands = format_recovery_commands(plan, pending)
        message = (
            f"{failure}\n"
            f"CRITICAL STATE: the worktrees could not be returned to their original branches.\n"
            f"{format_worktree_state(state)}\n"
            f"Please manually run:\n" + "\n".join(f"  {command}" for command in commands)
        )
        logger.error(message)
        return InconsistentStateError(message, state, commands, pending)

    # Phase 5 - Restore

    def _restore_worktree(
        self, worktree: WorktreeRef, capture: StashCapture, restore_index: Optional[bool] = None
    ) -> RestoreOutcome:
        if not capture.captured:
            logger.info(f"No stash from '{capture.branch}' to apply to '{worktree.path}'.")
            return RestoreOutcome(worktree.path, capture, RestoreStatus.NOTHING)

        if restore_index is None:
            restore_index = self.config.restore_index
        logger.info(
            f"Applying stash {capture.stash_hash} (from {capture.branch}) to '{worktree.path}'..."
        )
        try:
            self.backend.apply_and_drop_stash(worktree, capture.stash_hash, restore_index)
        except StashDropError as e:
            logger.warning(
                f"Failed to drop applied stash {capture.stash_hash}: {e.message}. "
                f"The stash remains in the list."
            )
            return RestoreOutcome(
                worktree.path, capture, RestoreStatus.APPLIED_NOT_DROPPED, e.message
            )
        except GitOperationError as e:
            # StashApplyError or any other failure; the stash stays in the list
            conflict = RestoreConflictError(worktree.path, capture.stash_hash, e.message)
            logger.warning(
                f"{conflict}\nThe stash has been kept. Please resolve manually in '{worktree.path}'."
            )
            return RestoreOutcome(worktree.path, capture, RestoreStatus.CONFLICT, str(conflict))

        logger.info("Successfully applied stash.")
        return RestoreOutcome(worktree.path, capture, RestoreStatus.APPLIED)

    def _restore(self, plan: SwapPlan, captures: CapturePair) -> List[RestoreOutcome]:
        self.current_phase = SwapPhase.RESTORE
        logger.info("Step 5: Applying stashes to their new locations...")
        destination_capture, source_capture = captures
        # Each worktree is restored independently; a conflict in one does not stop the other
        return [
            self._restore_worktree(plan.destination, source_capture),
            self._restore_worktree(plan.source, destination_capture),
        ]

    def _restore_in_place(
        self, plan: SwapPlan, captures: Union[CapturePair, List[StashCapture]]
    ) -> List[StashCapture]:
        """Re-apply stashes to the worktrees they were taken from.

        Only used after the branch assignment is back to what it was, so
        each stash lands on the commit it was made on and the index can be
        restored exactly.

        Returns:
            Captures that could not be applied and are still stashed
        """
        pending = []
        for capture in captures:
            if not capture.captured:
                continue
            worktree = plan.destination if capture.worktree_path == plan.destination.path else plan.source
            outcome = self._restore_worktree(worktree, capture, restore_index=True)
            if outcome.pending:
                pending.append(capture)
        return pending

    # Entry point

    def swap(self, destination_path: str, source_branch: str) -> SwapResult:
        """Exchange branches and uncommitted work between two worktrees.

        Args:
            destination_path: Directory of (or inside) the destination worktree
            source_branch: Branch checked out in the source worktree

        Returns:
            SwapResult; its status is PARTIAL when a stash could not be
            applied after the branches were swapped

        Raises:
            PreconditionError: Invalid invocation, nothing changed
            CaptureError: A stash could not be created, no branch changed
            DetachError: Detaching failed, rolled back
            CheckoutError: Checking out failed, rolled back
            InconsistentStateError: Rollback failed, manual recovery needed
        """
        plan = self.plan(destination_path, source_branch)
        captures = self._capture(plan)
        self._detach(plan, captures)
        self._exchange(plan, captures)
        restores = self._restore(plan, captures)
        self.current_phase = SwapPhase.DONE
        logger.info("Worktree swap complete.")
        return SwapResult(plan=plan, restores=restores)
