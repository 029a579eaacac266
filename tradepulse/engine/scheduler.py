"""SignalScheduler — drives periodic generation for every instrument group.

Each enabled group gets its own ``asyncio`` task that regenerates the
group's instruments one after another, stores the result and hands it to
the broadcaster. Groups run independently; instruments within a group are
strictly sequential so rate-limited providers see one request at a time.
"""

import asyncio
import logging
from typing import Protocol

from tradepulse.engine.signal_generator import SignalGenerator
from tradepulse.engine.signal_store import SignalStore
from tradepulse.models.instrument_group import InstrumentGroup
from tradepulse.models.signal import Signal

logger = logging.getLogger("tradepulse.scheduler")


class Broadcaster(Protocol):
    async def publish_signal(self, signal: Signal) -> None: ...


class SignalScheduler:
    """Lifecycle manager for the per-group generation loops.

    Args:
        generator: The ``SignalGenerator`` used for every instrument.
        store:     Latest-signal store, written after each generation.
        broadcaster: Anything with an async ``publish_signal(signal)``.
        groups:    Instrument groups in initial-pass order.
    """

    def __init__(
        self,
        generator: SignalGenerator,
        store: SignalStore,
        broadcaster: Broadcaster,
        groups: list[InstrumentGroup],
    ) -> None:
        self._generator = generator
        self._store = store
        self._broadcaster = broadcaster
        self._groups = [g for g in groups if g.enabled]
        self._running = False
        self._cycle_counts: dict[str, int] = {g.name: 0 for g in self._groups}
        self._tasks: dict[str, asyncio.Task] = {}

    # ── Public API ───────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._running

    @property
    def groups(self) -> list[InstrumentGroup]:
        return list(self._groups)

    def get_status(self) -> dict:
        """Per-group scheduling metadata for the status endpoint."""
        return {
            "running": self._running,
            "groups": {
                g.name: {
                    "kind": g.kind,
                    "pairs": list(g.pairs),
                    "interval_seconds": g.interval_seconds,
                    "cycle_count": self._cycle_counts.get(g.name, 0),
                }
                for g in self._groups
            },
        }

    async def run_cycle(self, group: InstrumentGroup) -> list[Signal]:
        """Generate, store and publish a signal for every pair in *group*."""
        logger.info("Cycle for '%s': %d pair(s)", group.name, len(group.pairs))
        signals: list[Signal] = []
        for pair in group.pairs:
            if group.kind == "otc":
                signal = await self._generator.generate_otc(pair)
            else:
                signal = await self._generator.generate(pair)
            self._store.put(signal)
            signals.append(signal)
            try:
                await self._broadcaster.publish_signal(signal)
            except Exception as exc:
                logger.error("Broadcast of %s failed: %s", pair, exc)
        self._cycle_counts[group.name] = self._cycle_counts.get(group.name, 0) + 1
        return signals

    async def run_all(self, max_cycles: int = 0) -> dict[str, int]:
        """Run the initial pass, then loop every group until stopped.

        Args:
            max_cycles: Stop each group after this many cycles, the initial
                pass included (0 = unlimited).

        Returns:
            ``{group_name: cycles_run}``.
        """
        self._running = True

        for group in self._groups:
            if not self._running:
                break
            await self.run_cycle(group)

        async def _run_group(group: InstrumentGroup) -> int:
            cycles = 1
            while self._running and (max_cycles == 0 or cycles < max_cycles):
                # Interruptible sleep, checks _running every second
                for _ in range(group.interval_seconds):
                    if not self._running:
                        break
                    await asyncio.sleep(1)
                if not self._running:
                    break
                await self.run_cycle(group)
                cycles += 1
            return cycles

        self._tasks = {
            g.name: asyncio.create_task(_run_group(g)) for g in self._groups
        }

        results: dict[str, int] = {}
        for name, task in self._tasks.items():
            try:
                results[name] = await task
            except Exception as exc:  # pragma: no cover
                logger.error("Group '%s' crashed: %s", name, exc)
                results[name] = self._cycle_counts.get(name, 0)

        self._running = False
        return results

    def stop(self) -> None:
        """Signal every group loop to exit after its current step."""
        self._running = False
        logger.info("Stop signal sent to %d group(s).", len(self._groups))
