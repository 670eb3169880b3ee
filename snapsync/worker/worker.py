from snapsync.logging.logger import Log
from snapsync.worker.pass_runner import PassReport, PassRunner
from snapsync.worker.scheduler import AFTER_BACKOFF, PassScheduler, PassTick


class Worker:
    """Pipeline loop: tick -> pass -> (backoff | interval)."""

    def __init__(self, pass_runner: PassRunner, scheduler: PassScheduler) -> None:
        self._pass_runner = pass_runner
        self._scheduler = scheduler

    def run(self, max_passes: int | None = None) -> None:
        """Main loop. Runs forever until interrupted.

        If max_passes is set, stop after that many passes (for testing).
        """
        Log.info("Worker started, scanning channel", component="Worker")
        try:
            for tick in self._scheduler.ticks():
                report = self._run_pass(tick)
                if report is not None and report.rate_limited:
                    Log.warning(
                        "Pausing all uploads due to rate limit, pass will restart",
                        component="RateLimit",
                    )
                    self._scheduler.request_backoff()
                if max_passes is not None and tick.number >= max_passes:
                    break
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully", component="Worker")

    def _run_pass(self, tick: PassTick) -> PassReport | None:
        """Run one pass. Errors end the pass early but never the process."""
        if tick.reason == AFTER_BACKOFF:
            Log.info(f"Restarting pass {tick.number} after backoff", component="Worker")
        else:
            Log.info(f"Scanning (pass {tick.number}, {tick.reason})", component="Heartbeat")
        try:
            return self._pass_runner.run_pass()
        except Exception as exc:
            Log.error(f"Pass {tick.number} aborted: {exc}", component="Worker")
            return None
