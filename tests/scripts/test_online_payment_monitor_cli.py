"""
Test suite for the finna-payment-monitor command.

System role: Verification of command line parsing and the monitor run wrapper
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from finna.application.services.payment_monitor import MonitorReport
from finna.scripts.online_payment_monitor import build_parser, main, run_monitor

MODULE = "finna.scripts.online_payment_monitor"


@pytest.fixture
def mock_session() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def mock_engine() -> MagicMock:
    engine = MagicMock()
    engine.dispose = AsyncMock()
    return engine


@pytest.fixture
def patched_db(mock_session, mock_engine):
    @asynccontextmanager
    async def session_factory():
        yield mock_session

    with patch(f"{MODULE}.get_async_session_factory", return_value=session_factory), patch(
        f"{MODULE}.get_async_engine", return_value=mock_engine
    ):
        yield


class TestParser:
    """Test suite for build_parser()."""

    def test_positional_arguments(self) -> None:
        args = build_parser().parse_args(["24", "finna@example.org", "12"])

        assert args.expire_hours == 24
        assert args.from_email == "finna@example.org"
        assert args.report_interval_hours == 12
        assert args.log_level == "INFO"

    def test_non_numeric_hours_should_fail(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["soon", "finna@example.org", "12"])


class TestRunMonitor:
    """Test suite for run_monitor()."""

    @pytest.mark.asyncio
    async def test_commits_and_disposes(self, patched_db, mock_session, mock_engine) -> None:
        args = build_parser().parse_args(["24", "finna@example.org", "12"])
        report = MonitorReport(registered=2)

        with patch(f"{MODULE}.OnlinePaymentMonitor") as monitor_class:
            monitor_class.return_value.run = AsyncMock(return_value=report)
            result = await run_monitor(args)

        assert result is report
        assert monitor_class.call_args.kwargs["expire_hours"] == 24
        assert monitor_class.call_args.kwargs["from_email"] == "finna@example.org"
        mock_session.commit.assert_awaited_once()
        mock_engine.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, patched_db, mock_session, mock_engine) -> None:
        args = build_parser().parse_args(["24", "finna@example.org", "12"])

        with patch(f"{MODULE}.OnlinePaymentMonitor") as monitor_class:
            monitor_class.return_value.run = AsyncMock(side_effect=RuntimeError("db gone"))
            with pytest.raises(RuntimeError):
                await run_monitor(args)

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()
        mock_engine.dispose.assert_awaited_once()


class TestMain:
    """Test suite for main()."""

    def test_main_runs_monitor(self) -> None:
        with patch(f"{MODULE}.run_monitor", new_callable=AsyncMock) as mock_run, patch(
            f"{MODULE}.configure_logging"
        ) as mock_logging:
            mock_run.return_value = MonitorReport(expired=1)

            assert main(["24", "finna@example.org", "12", "--log-level", "DEBUG"]) == 0

        mock_run.assert_awaited_once()
        assert mock_run.await_args.args[0].expire_hours == 24
        mock_logging.assert_called_once_with(10)
