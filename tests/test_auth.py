"""Tests for the admin passphrase check."""

from filmfolio.auth import check_passphrase


class TestCheckPassphrase:
    def test_match(self):
        assert check_passphrase("1228", "1228") is True

    def test_mismatch(self):
        assert check_passphrase("1229", "1228") is False

    def test_missing_candidate(self):
        assert check_passphrase(None, "1228") is False

    def test_empty_expected_locks_admin(self):
        assert check_passphrase("", "") is False
        assert check_passphrase("anything", "") is False

    def test_non_ascii(self):
        assert check_passphrase("비밀", "비밀") is True
