"""Tests for the environment validation script."""

import pytest

from vaultshare.scripts import validate_env


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "SUPABASE_URL", "SUPABASE_ANON_KEY",
        "NEXT_PUBLIC_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestValidateEnv:
    def test_all_present(self, clean_env, caplog):
        clean_env.setenv("SUPABASE_URL", "https://abcdefghijkl.supabase.co")
        clean_env.setenv("SUPABASE_ANON_KEY", "eyJhbGciOiJIUzI1NiJ9.payload.sig")

        with caplog.at_level("INFO"):
            assert validate_env.main([]) == 0

        text = caplog.text
        assert "https://ab..." in text
        assert "payload" not in text

    def test_missing_is_tolerated_by_default(self, clean_env, caplog):
        with caplog.at_level("INFO"):
            assert validate_env.main([]) == 0
        assert "MISSING  SUPABASE_URL" in caplog.text

    def test_missing_fails_in_strict_mode(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://abcdefghijkl.supabase.co")
        assert validate_env.main(["--strict"]) == 1

    def test_legacy_variable_names_accepted(self, clean_env):
        clean_env.setenv("NEXT_PUBLIC_SUPABASE_URL", "https://abcdefghijkl.supabase.co")
        clean_env.setenv("NEXT_PUBLIC_SUPABASE_ANON_KEY", "eyJhbGciOiJIUzI1NiJ9.payload.sig")
        assert validate_env.main(["--strict"]) == 0
