from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock, patch

from crm_validator.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    def test_tty_creates_bar(self):
        with patch("crm_validator.services.progress.is_tty_enabled", return_value=True), \
             patch("crm_validator.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(4)
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=4,
                desc="Validating files",
                unit="file",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_non_tty_is_noop(self):
        with patch("crm_validator.services.progress.is_tty_enabled", return_value=False):
            with ProgressTracker(2) as tracker:
                tracker.start_file(Path("a.xlsx"))
                tracker.set_postfix(rows=1)
                tracker.finish_file()
            assert tracker.pbar is None
            assert tracker.current_file == 1

    def test_file_lifecycle_updates_bar(self):
        mock_pbar = Mock()
        with patch("crm_validator.services.progress.is_tty_enabled", return_value=True), \
             patch("crm_validator.services.progress.tqdm", return_value=mock_pbar):
            tracker = ProgressTracker(1, description="Validando")
            tracker.start_file(Path("leads.xlsx"))
            mock_pbar.set_description.assert_called_with("Validando (leads.xlsx)")
            tracker.set_postfix(rows=3, invalid=1)
            mock_pbar.set_postfix.assert_called_once_with(rows=3, invalid=1)
            tracker.finish_file()
            mock_pbar.update.assert_called_once_with(1)
            mock_pbar.set_description.assert_called_with("Validando")
            tracker.close()
            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
