"""Unit tests for the entrypoint mode dispatch."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from inspoclock.cli import main
from inspoclock.errors import ErrorCode, InspoClockError


class TestMain:
    def test_generate_mode_exits_with_pipeline_status(self) -> None:
        with (
            patch("inspoclock.cli._setup_logging"),
            patch("inspoclock.cli.generate", MagicMock(return_value=1)) as mock_generate,
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
        mock_generate.assert_called_once()

    def test_serve_mode_runs_mirror(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INSPOCLOCK__SERVER__MODE", "serve")
        mock_serve = AsyncMock()

        with (
            patch("inspoclock.cli._setup_logging"),
            patch("inspoclock.cli.serve_mirror", mock_serve),
        ):
            main()

        mock_serve.assert_awaited_once()

    def test_serve_mode_install_failure_exits_non_zero(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("INSPOCLOCK__SERVER__MODE", "serve")
        error = InspoClockError(
            code=ErrorCode.INSTALL_FAILED, message="unreachable", suggestion="retry"
        )

        with (
            patch("inspoclock.cli._setup_logging"),
            patch("inspoclock.cli.serve_mirror", AsyncMock(side_effect=error)),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
