"""Parallel munger - process many files concurrently."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

from ourpkgversion.core.interfaces import IReporter
from ourpkgversion.core.model import DistFile, ModeFlags, Outcome
from ourpkgversion.core.munger import LoggerReporter, munge_file
from ourpkgversion.core.versions import validate_version

ProgressCallback = Callable[[int, int, DistFile, Outcome], None]


class ParallelMunger:
    """Munge files on worker threads, at most ``max_concurrent`` at a time.

    Each file is an independent unit of work. A file, once started, is always
    finished; cancelling the batch only stops files that have not started.
    """

    def __init__(
        self,
        flags: ModeFlags,
        reporter: IReporter | None = None,
        max_concurrent: int = 4,
        dry_run: bool = False,
    ) -> None:
        """Initialize parallel munger.

        Args:
            flags: Run-wide version and mode flags
            reporter: Receives one outcome per file
            max_concurrent: Maximum files in flight
            dry_run: Report without writing
        """
        self.flags = flags
        self.reporter = reporter or LoggerReporter()
        self.max_concurrent = max_concurrent
        self.dry_run = dry_run
        self.cancelled = asyncio.Event()

    def cancel(self) -> None:
        """Stop starting new files; files in flight still complete."""
        self.cancelled.set()

    async def munge_one(
        self, semaphore: asyncio.Semaphore, dist_file: DistFile
    ) -> tuple[DistFile, Outcome | None]:
        async with semaphore:
            if self.cancelled.is_set():
                return dist_file, None
            # Shielded: cancelling the batch must not abandon a half-done file.
            outcome = await asyncio.shield(
                asyncio.to_thread(munge_file, dist_file, self.flags, self.reporter, dry_run=self.dry_run)
            )
            return dist_file, outcome

    async def munge_batch(
        self,
        files: Sequence[DistFile],
        progress_callback: ProgressCallback | None = None,
    ) -> list[tuple[DistFile, Outcome]]:
        """Munge ``files`` and return outcomes in input order.

        Files skipped because of cancellation are left out of the result.

        Raises:
            InvalidVersionError: Before any file is touched
            OurPkgVersionError: The first per-file failure, after all
                started files have finished
        """
        validate_version(self.flags.version)

        semaphore = asyncio.Semaphore(self.max_concurrent)
        tasks = [asyncio.create_task(self.munge_one(semaphore, f)) for f in files]

        done = 0
        for fut in asyncio.as_completed(tasks):
            try:
                finished, outcome = await fut
            except Exception:
                # Let the other workers finish before propagating.
                self.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
            done += 1
            if progress_callback is not None and outcome is not None:
                progress_callback(done, len(tasks), finished, outcome)

        results: list[tuple[DistFile, Outcome]] = []
        for t in tasks:
            f, outcome = t.result()
            if outcome is not None:
                results.append((f, outcome))
        return results


def run_parallel(
    files: Sequence[DistFile],
    flags: ModeFlags,
    reporter: IReporter | None = None,
    max_concurrent: int = 4,
    dry_run: bool = False,
) -> list[tuple[DistFile, Outcome]]:
    """Synchronous wrapper around ParallelMunger.munge_batch."""
    munger = ParallelMunger(flags, reporter, max_concurrent=max_concurrent, dry_run=dry_run)
    return asyncio.run(munger.munge_batch(files))
