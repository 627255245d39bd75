"""Tests for bcrypt password hashing and verification."""

from __future__ import annotations

import unittest

from accounts.passwords import DEFAULT_BCRYPT_ROUNDS, CredentialManager


class PasswordHashingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.credentials = CredentialManager(rounds=4)

    def test_hash_verifies_against_original_password(self) -> None:
        hashed = self.credentials.hash("supersecurepassword")
        self.assertNotEqual(hashed, "supersecurepassword")
        self.assertTrue(self.credentials.verify("supersecurepassword", hashed))

    def test_other_password_does_not_verify(self) -> None:
        hashed = self.credentials.hash("supersecurepassword")
        self.assertFalse(self.credentials.verify("incorrect", hashed))
        self.assertFalse(self.credentials.verify("supersecurepassword ", hashed))

    def test_same_password_hashes_differently(self) -> None:
        first = self.credentials.hash("pw12345")
        second = self.credentials.hash("pw12345")
        self.assertNotEqual(first, second)
        self.assertTrue(self.credentials.verify("pw12345", first))
        self.assertTrue(self.credentials.verify("pw12345", second))

    def test_malformed_hash_returns_false(self) -> None:
        """Unrecognised or missing hashes are a mismatch, never an exception."""

        for stored in ("", "not-a-hash", "$2b$04$short", None):
            with self.subTest(stored=stored):
                self.assertFalse(self.credentials.verify("pw12345", stored))

    def test_default_cost_factor_is_embedded_in_hash(self) -> None:
        credentials = CredentialManager()
        self.assertEqual(credentials.rounds, DEFAULT_BCRYPT_ROUNDS)
        hashed = credentials.hash("pw12345")
        self.assertTrue(hashed.startswith("$2b$10$"), hashed)
        self.assertTrue(credentials.verify("pw12345", hashed))

    def test_needs_rehash_when_cost_factor_changes(self) -> None:
        hashed = self.credentials.hash("pw12345")
        self.assertFalse(self.credentials.needs_rehash(hashed))
        self.assertTrue(CredentialManager(rounds=5).needs_rehash(hashed))
        self.assertTrue(self.credentials.needs_rehash("garbage"))

    def test_dummy_verify_never_matches(self) -> None:
        self.assertFalse(self.credentials.dummy_verify("pw12345"))
        self.assertFalse(self.credentials.dummy_verify(""))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
