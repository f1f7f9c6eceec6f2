"""Tests for scripts.store_credentials."""

from unittest.mock import patch

import pytest

from scripts.store_credentials import StoreReport, remove_from_env, store_credentials


@pytest.fixture
def env_file(tmp_path):
    p = tmp_path / ".env"
    p.write_text(
        "# Database\n"
        "DATABASE_URL=sqlite:///./portfolio.db\n"
        "\n"
        "# Providers\n"
        "ALPHA_VANTAGE_API_KEY=av-key\n"
        "COINGECKO_API_KEY=\n"
        "OPEN_EXCHANGE_RATES_API_KEY=oxr-key\n"
    )
    return p


class TestStoreCredentials:
    def test_stores_non_empty_credentials(self, env_file):
        with (
            patch("scripts.store_credentials.set_credential", return_value=True) as mock_set,
            patch("scripts.store_credentials.get_credential", return_value=None),
        ):
            report = store_credentials(env_file)

        stored = {call.args[0] for call in mock_set.call_args_list}
        assert stored == {"ALPHA_VANTAGE_API_KEY", "OPEN_EXCHANGE_RATES_API_KEY"}
        assert "COINGECKO_API_KEY" in report.absent
        assert "CRON_SECRET" in report.absent

    def test_same_value_not_rewritten(self, env_file):
        def fake_get(key):
            return "av-key" if key == "ALPHA_VANTAGE_API_KEY" else None

        with (
            patch("scripts.store_credentials.set_credential", return_value=True) as mock_set,
            patch("scripts.store_credentials.get_credential", side_effect=fake_get),
        ):
            report = store_credentials(env_file)

        assert report.unchanged == ["ALPHA_VANTAGE_API_KEY"]
        assert "ALPHA_VANTAGE_API_KEY" not in {c.args[0] for c in mock_set.call_args_list}

    def test_failures_reported(self, env_file):
        with (
            patch("scripts.store_credentials.set_credential", return_value=False),
            patch("scripts.store_credentials.get_credential", return_value=None),
        ):
            report = store_credentials(env_file)

        assert report.failed == ["ALPHA_VANTAGE_API_KEY", "OPEN_EXCHANGE_RATES_API_KEY"]
        assert report.in_keychain == []

    def test_missing_env_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            store_credentials(tmp_path / ".env")


class TestRemoveFromEnv:
    def test_removes_only_named_keys(self, env_file):
        removed = remove_from_env(env_file, ["ALPHA_VANTAGE_API_KEY"])

        content = env_file.read_text()
        assert removed == 1
        assert "ALPHA_VANTAGE_API_KEY" not in content
        assert "OPEN_EXCHANGE_RATES_API_KEY=oxr-key" in content
        assert "DATABASE_URL=" in content
        assert "# Providers" in content

    def test_report_in_keychain(self):
        report = StoreReport(stored=["A"], unchanged=["B"], failed=["C"])
        assert report.in_keychain == ["A", "B"]
