"""Periodic decision loop.

Calls ``UniverseAgent.make_decision`` once per interval until stopped.  A
failed cycle (LLM unavailable, event rejected) is logged and skipped; the
next tick tries again.  Stopping is cooperative via ``stop()``; cancelling
the task running ``run()`` also works and interrupts an in-flight LLM call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from bu_agent.agent_runtime.llm import LLMError
from bu_agent.ledger.crypto import LedgerError

if TYPE_CHECKING:
    from bu_agent.agent_runtime.agent import UniverseAgent

logger = logging.getLogger(__name__)


class DecisionLoop:
    def __init__(self, agent: UniverseAgent, interval: float) -> None:
        self._agent = agent
        self._interval = interval
        self._stop = asyncio.Event()
        self.decisions = 0
        self.failures = 0

    @property
    def is_stopping(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        """Ask the loop to exit after the current cycle."""
        self._stop.set()

    async def run_once(self) -> bool:
        """Run one decision cycle.  Returns ``True`` if an event was written."""
        try:
            await self._agent.make_decision()
        except (LLMError, LedgerError) as exc:
            self.failures += 1
            logger.error("Decision error: %s", exc)
            return False
        self.decisions += 1
        return True

    async def run(self) -> None:
        """Tick until ``stop()`` is called."""
        logger.info("Decision loop started (interval=%.1fs)", self._interval)
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
            except TimeoutError:
                await self.run_once()
        logger.info(
            "Decision loop stopped (decisions=%d, failures=%d)",
            self.decisions,
            self.failures,
        )
