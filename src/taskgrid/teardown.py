"""
Teardown: return every grid pane to its daemon session and restore the
orchestrator window.
"""

import time
from dataclasses import dataclass, field
from typing import List, Sequence

from .exceptions import PaneSetupError, TmuxCommandError
from .gateway import TmuxGateway
from .logging_config import get_logger
from .models import PaneHandle
from .registry import PaneRegistry
from .settings import DEFAULT_UI_SESSION, FULL_SIZE

logger = get_logger("teardown")


@dataclass
class TeardownReport:
    broken: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class TeardownCoordinator:
    """Reverses PaneAcquisitionService.acquire."""

    def __init__(self, gateway: TmuxGateway, ui_session: str = DEFAULT_UI_SESSION):
        self.gateway = gateway
        self.ui_session = ui_session

    def _remaining(self, deadline: float, per_call: float) -> float:
        return max(0.05, min(per_call, deadline - time.monotonic()))

    def teardown(self, registry: PaneRegistry, stray: Sequence[PaneHandle] = ()) -> TeardownReport:
        """Break every grid pane back out to its origin session.

        Per-pane failures are logged and skipped. The registry's grid entries
        are cleared once every pane has been attempted.

        Args:
            registry: grid panes to return
            stray: grid panes no longer indexed by a slot (their task left
                the active list since setup) that still need returning

        Raises:
            PaneSetupError: the orchestrator's own pane can't be determined;
                nothing is modified in that case
        """
        timeouts = self.gateway.timeouts
        try:
            orchestrator = self.gateway.current_pane_id()
        except TmuxCommandError as e:
            logger.error(f"Teardown aborted, orchestrator pane unknown: {e}")
            raise PaneSetupError(f"Cannot determine the orchestrator pane: {e}") from e

        handles = [h for _, h in registry.slots()] + list(stray)
        logger.info(f"Breaking {len(handles)} grid panes")
        deadline = time.monotonic() + timeouts.teardown
        report = TeardownReport()

        for handle in handles:
            pane_id = handle.pane_id
            if pane_id == orchestrator or not handle.origin_session:
                report.skipped.append(pane_id)
                continue

            if not self.gateway.pane_exists(pane_id, timeout=self._remaining(deadline, timeouts.probe)):
                logger.debug(f"Pane {pane_id} (task {handle.task_id}) no longer exists, skipping")
                report.skipped.append(pane_id)
                continue

            logger.debug(f"Breaking pane {pane_id} back to {handle.origin_session}")
            try:
                self.gateway.break_pane(
                    pane_id,
                    target_session=handle.origin_session,
                    timeout=self._remaining(deadline, timeouts.single),
                )
                report.broken.append(pane_id)
            except TmuxCommandError as e:
                logger.warning(f"Failed to break pane {pane_id} for task {handle.task_id}: {e}")
                report.failed.append(pane_id)

        try:
            self.gateway.resize_pane(orchestrator, FULL_SIZE)
        except TmuxCommandError as e:
            logger.warning(f"Failed to restore orchestrator pane size: {e}")
        try:
            self.gateway.clear_border_titles(self.ui_session)
        except TmuxCommandError as e:
            logger.warning(f"Failed to hide pane border titles: {e}")

        registry.clear_grid()
        logger.info(
            f"Teardown done: {len(report.broken)} broken, "
            f"{len(report.skipped)} skipped, {len(report.failed)} failed"
        )
        return report
