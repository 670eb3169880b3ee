from unittest.mock import MagicMock

from snapsync.worker.pass_runner import PassReport
from snapsync.worker.scheduler import PassScheduler
from snapsync.worker.worker import Worker


def _make_worker() -> tuple[Worker, MagicMock, MagicMock]:
    """Create a Worker with a mocked pass runner and a recorded sleep."""
    runner = MagicMock()
    runner.run_pass.return_value = PassReport()
    sleep = MagicMock()
    worker = Worker(runner, PassScheduler(30, 120, sleep=sleep))
    return worker, runner, sleep


class TestWorkerPasses:
    def test_runs_requested_number_of_passes(self) -> None:
        worker, runner, sleep = _make_worker()

        worker.run(max_passes=3)

        assert runner.run_pass.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [30, 30]

    def test_single_pass_does_not_sleep(self) -> None:
        worker, runner, sleep = _make_worker()

        worker.run(max_passes=1)

        runner.run_pass.assert_called_once()
        sleep.assert_not_called()


class TestWorkerBackoff:
    def test_rate_limited_pass_backs_off_then_restarts(self) -> None:
        worker, runner, sleep = _make_worker()
        runner.run_pass.side_effect = [PassReport(rate_limited=True), PassReport()]

        worker.run(max_passes=2)

        assert runner.run_pass.call_count == 2
        sleep.assert_called_once_with(120)


class TestWorkerErrors:
    def test_pass_exception_is_not_fatal(self) -> None:
        worker, runner, sleep = _make_worker()
        runner.run_pass.side_effect = [RuntimeError("discord down"), PassReport()]

        worker.run(max_passes=2)

        assert runner.run_pass.call_count == 2
        sleep.assert_called_once_with(30)

    def test_handles_keyboard_interrupt(self) -> None:
        worker, runner, _sleep = _make_worker()
        runner.run_pass.side_effect = KeyboardInterrupt

        worker.run()  # Should not raise
