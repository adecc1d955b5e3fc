"""
Tests for layered .env loading.
"""

import os

import pytest

from mdsync.core.config.env import load_layered_env


@pytest.fixture
def unset_value(monkeypatch):
    """Remove MDSYNC_TEST_VALUE and restore the environment afterwards."""
    monkeypatch.setenv("MDSYNC_TEST_VALUE", "placeholder")
    monkeypatch.delenv("MDSYNC_TEST_VALUE")


class TestLoadLayeredEnv:
    """Test user/project .env precedence."""

    def test_project_overrides_user(self, tmp_path, unset_value):
        """Later files override earlier ones."""
        user_env = tmp_path / "user.env"
        user_env.write_text("MDSYNC_TEST_VALUE=user\n")
        project_env = tmp_path / ".env"
        project_env.write_text("MDSYNC_TEST_VALUE=project\n")

        load_layered_env(user_env_paths=[user_env], project_env_paths=[project_env])
        assert os.environ["MDSYNC_TEST_VALUE"] == "project"

    def test_os_environment_wins(self, tmp_path, monkeypatch):
        """Variables already in the environment are never replaced."""
        monkeypatch.setenv("MDSYNC_TEST_VALUE", "shell")
        env_file = tmp_path / ".env"
        env_file.write_text("MDSYNC_TEST_VALUE=file\n")

        load_layered_env(user_env_paths=[], project_env_paths=[env_file])
        assert os.environ["MDSYNC_TEST_VALUE"] == "shell"

    def test_local_env_in_project_dir(self, tmp_path, unset_value):
        """.env.local in the project directory overrides .env."""
        (tmp_path / ".env").write_text("MDSYNC_TEST_VALUE=shared\n")
        (tmp_path / ".env.local").write_text("MDSYNC_TEST_VALUE=local\n")

        load_layered_env(project_dir=tmp_path, user_env_paths=[])
        assert os.environ["MDSYNC_TEST_VALUE"] == "local"

    def test_missing_files_are_ignored(self, tmp_path):
        """Nonexistent env files are skipped silently."""
        load_layered_env(
            user_env_paths=[tmp_path / "missing.env"],
            project_env_paths=[tmp_path / "also-missing.env"],
        )
