#!/usr/bin/env python3
"""
COINHYPE — Provably Fair Engine Tests

Run: python tests_fair_rng.py
     pytest tests_fair_rng.py

Test categories:
  TestDerivation   — HMAC derivation, determinism, stream extension
  TestFairStream   — rejection sampling, range, cursor handling
  TestGameSeed     — seed triple validation
  TestSessions     — nonce bookkeeping, reveal, rotate, client seed changes
  TestAudit        — verification helpers and tamper detection
"""

import dataclasses
import hashlib
import hmac
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.errors import InvalidSeedError, SeedIntegrityError
from tools.fair_rng import (
    ROLL_SPACE, FairStream, GameSeed, ProvablyFairRNG, SecureSource, SeededSource,
    derive_hash, generate_client_seed, generate_result, generate_server_seed,
    generate_verification_js, hash_server_seed, hash_to_float,
)

SERVER = "a3f1c0ffee"
CLIENT = "player-seed"


# ============================================================
# Derivation
# ============================================================

class TestDerivation(unittest.TestCase):

    def test_derive_hash_is_hmac_sha256(self):
        expected = hmac.new(SERVER.encode(), f"{CLIENT}:7".encode(), hashlib.sha256).hexdigest()
        self.assertEqual(derive_hash(SERVER, CLIENT, 7), expected)
        self.assertEqual(len(expected), 64)

    def test_cursor_extends_message(self):
        expected = hmac.new(SERVER.encode(), f"{CLIENT}:7:2".encode(), hashlib.sha256).hexdigest()
        self.assertEqual(derive_hash(SERVER, CLIENT, 7, cursor=2), expected)
        self.assertNotEqual(derive_hash(SERVER, CLIENT, 7, cursor=2), derive_hash(SERVER, CLIENT, 7))

    def test_generate_result_deterministic(self):
        seed = GameSeed(SERVER, CLIENT, 3)
        a = generate_result(seed)
        b = generate_result(seed)
        self.assertEqual(a, b)
        self.assertEqual(a.hash, derive_hash(SERVER, CLIENT, 3))
        self.assertTrue(0 <= a.roll < ROLL_SPACE)
        self.assertEqual(a.result, a.roll / ROLL_SPACE)
        self.assertTrue(0 <= a.result < 1)

    def test_nonce_changes_result(self):
        hashes = {generate_result(GameSeed(SERVER, CLIENT, n)).hash for n in range(20)}
        self.assertEqual(len(hashes), 20)

    def test_hash_to_float_range(self):
        self.assertEqual(hash_to_float("00000000" + "f" * 56), 0.0)
        self.assertLess(hash_to_float("ffffffff"), 1.0)
        self.assertAlmostEqual(hash_to_float("80000000"), 0.5)

    def test_seed_generators(self):
        self.assertEqual(len(generate_server_seed()), 64)
        self.assertEqual(len(generate_client_seed()), 32)
        self.assertNotEqual(generate_server_seed(), generate_server_seed())

    def test_commitment_is_sha256(self):
        self.assertEqual(hash_server_seed(SERVER), hashlib.sha256(SERVER.encode()).hexdigest())

    def test_verification_data_hides_seed_until_reveal(self):
        proof = generate_result(GameSeed(SERVER, CLIENT, 0))
        self.assertNotIn("server_seed", proof.verification_data())
        self.assertEqual(proof.verification_data(reveal=True)["server_seed"], SERVER)
        self.assertNotIn(SERVER, repr(proof))


# ============================================================
# FairStream
# ============================================================

class TestFairStream(unittest.TestCase):

    def test_first_word_matches_digest(self):
        stream = FairStream(GameSeed(SERVER, CLIENT, 0))
        self.assertEqual(stream.next_int(2 ** 32), int(stream.hash[:8], 16))

    def test_extends_to_next_digest_after_eight_words(self):
        stream = FairStream(GameSeed(SERVER, CLIENT, 0))
        for _ in range(8):
            stream.next_int(2 ** 32)
        ninth = stream.next_int(2 ** 32)
        self.assertEqual(stream.cursor, 1)
        self.assertEqual(ninth, int(derive_hash(SERVER, CLIENT, 0, cursor=1)[:8], 16))
        self.assertEqual(stream.words_used, 9)

    def test_values_below_limit(self):
        stream = FairStream(GameSeed(SERVER, CLIENT, 11))
        for limit in (1, 2, 3, 25, 37, 52, 1_000_000, ROLL_SPACE):
            for _ in range(50):
                v = stream.next_int(limit)
                self.assertTrue(0 <= v < limit, f"{v} outside [0, {limit})")

    def test_rejects_words_above_ceiling(self):
        # 2^32 mod 3 == 1, so the top word is the only rejected value
        stream = FairStream(GameSeed(SERVER, CLIENT, 0))
        with patch.object(stream, "_next_word", side_effect=[0xFFFFFFFF, 7]):
            self.assertEqual(stream.next_int(3), 1)

    def test_bad_limit(self):
        stream = FairStream(GameSeed(SERVER, CLIENT, 0))
        for bad in (0, -1, 2 ** 32 + 1, 1.5, True):
            with self.assertRaises(ValueError):
                stream.next_int(bad)

    def test_alternate_sources_share_interface(self):
        a, b = SeededSource(9), SeededSource(9)
        self.assertEqual([a.next_roll() for _ in range(5)], [b.next_roll() for _ in range(5)])
        secure = SecureSource()
        self.assertTrue(all(0 <= secure.next_int(37) < 37 for _ in range(100)))


# ============================================================
# GameSeed
# ============================================================

class TestGameSeed(unittest.TestCase):

    def test_rejects_empty_seeds(self):
        with self.assertRaises(InvalidSeedError):
            GameSeed("", CLIENT, 0)
        with self.assertRaises(InvalidSeedError):
            GameSeed(SERVER, "", 0)

    def test_rejects_bad_nonce(self):
        for bad in (-1, 1.0, True, "3"):
            with self.assertRaises(InvalidSeedError):
                GameSeed(SERVER, CLIENT, bad)

    def test_error_code(self):
        try:
            GameSeed(SERVER, CLIENT, -5)
        except InvalidSeedError as e:
            self.assertEqual(e.code, "INVALID_SEED")
            self.assertEqual(e.to_dict()["error"], "INVALID_SEED")
        else:
            self.fail("negative nonce accepted")


# ============================================================
# Sessions
# ============================================================

class TestSessions(unittest.TestCase):

    def setUp(self):
        self.rng = ProvablyFairRNG()
        self.session = self.rng.new_session(client_seed=CLIENT)

    def test_commitment_published(self):
        self.assertEqual(self.session.server_seed_hash, hash_server_seed(self.session.server_seed))
        self.assertNotIn(self.session.server_seed, repr(self.session))

    def test_nonces_auto_increment(self):
        proofs = [self.rng.draw(self.session) for _ in range(3)]
        self.assertEqual([p.nonce for p in proofs], [0, 1, 2])
        self.assertEqual(self.session.nonce, 3)
        self.assertEqual(len(self.session.rounds), 3)

    def test_explicit_nonce_reuse_rejected(self):
        self.rng.draw(self.session, nonce=5)
        with self.assertRaises(InvalidSeedError):
            self.rng.draw(self.session, nonce=5)
        # Auto nonces continue past the explicit one
        self.assertEqual(self.rng.draw(self.session).nonce, 6)

    def test_revealed_session_is_closed(self):
        self.rng.draw(self.session)
        seed = self.rng.reveal(self.session)
        self.assertEqual(seed, self.session.server_seed)
        with self.assertRaises(InvalidSeedError):
            self.rng.draw(self.session)

    def test_client_seed_change_only_before_first_round(self):
        self.rng.set_client_seed(self.session, "fresh")
        self.assertEqual(self.session.client_seed, "fresh")
        self.rng.draw(self.session)
        with self.assertRaises(InvalidSeedError):
            self.rng.set_client_seed(self.session, "again")
        with self.assertRaises(InvalidSeedError):
            ProvablyFairRNG().set_client_seed(ProvablyFairRNG().new_session(), "")

    def test_rotate(self):
        self.rng.draw(self.session)
        old_seed, fresh = self.rng.rotate(self.session)
        self.assertTrue(self.session.revealed)
        self.assertEqual(old_seed, self.session.server_seed)
        self.assertEqual(fresh.client_seed, CLIENT)
        self.assertNotEqual(fresh.server_seed, old_seed)
        self.assertEqual(fresh.nonce, 0)

    def test_audit_log_requires_reveal(self):
        self.rng.draw(self.session)
        self.rng.draw(self.session)
        with self.assertRaises(InvalidSeedError):
            self.rng.session_audit_log(self.session)
        self.rng.reveal(self.session)
        log = self.rng.session_audit_log(self.session)
        self.assertEqual(log["total_rounds"], 2)
        self.assertEqual(log["server_seed"], self.session.server_seed)
        self.assertEqual([r["nonce"] for r in log["rounds"]], [0, 1])


# ============================================================
# Audit
# ============================================================

class TestAudit(unittest.TestCase):

    def setUp(self):
        self.proof = generate_result(GameSeed(SERVER, CLIENT, 4))

    def test_verify_round(self):
        self.assertTrue(ProvablyFairRNG.verify_round(SERVER, CLIENT, 4, self.proof.hash))
        self.assertTrue(ProvablyFairRNG.verify_round(SERVER, CLIENT, 4, self.proof.hash.upper()))
        self.assertFalse(ProvablyFairRNG.verify_round(SERVER, CLIENT, 5, self.proof.hash))
        self.assertFalse(ProvablyFairRNG.verify_round("other", CLIENT, 4, self.proof.hash))

    def test_verify_server_seed(self):
        commitment = hash_server_seed(SERVER)
        self.assertTrue(ProvablyFairRNG.verify_server_seed(SERVER, commitment))
        self.assertFalse(ProvablyFairRNG.verify_server_seed("other", commitment))
        with self.assertRaises(SeedIntegrityError):
            ProvablyFairRNG.audit_commitment("other", commitment)

    def test_audit_round_passes(self):
        ProvablyFairRNG.audit_round(self.proof, SERVER)
        ProvablyFairRNG.audit_round(self.proof)

    def test_audit_detects_wrong_seed(self):
        with self.assertRaises(SeedIntegrityError) as ctx:
            ProvablyFairRNG.audit_round(self.proof, "not-the-seed")
        self.assertEqual(ctx.exception.code, "SEED_INTEGRITY_FAILURE")

    def test_audit_detects_tampered_roll(self):
        tampered = dataclasses.replace(self.proof, roll=(self.proof.roll + 1) % ROLL_SPACE)
        with self.assertRaises(SeedIntegrityError):
            ProvablyFairRNG.audit_round(tampered, SERVER)

    def test_audit_detects_tampered_hash(self):
        tampered = dataclasses.replace(self.proof, hash="0" * 64)
        with self.assertRaises(SeedIntegrityError):
            ProvablyFairRNG.audit_round(tampered, SERVER)

    def test_non_ascii_hash_is_a_mismatch(self):
        self.assertFalse(ProvablyFairRNG.verify_round(SERVER, CLIENT, 4, "\u00e9" * 64))
        self.assertFalse(ProvablyFairRNG.verify_server_seed(SERVER, "\u00fc" * 64))
        self.assertFalse(ProvablyFairRNG.verify_round(SERVER, CLIENT, 4, None))
        tampered = dataclasses.replace(self.proof, hash="\u00e9" + self.proof.hash[1:])
        with self.assertRaises(SeedIntegrityError):
            ProvablyFairRNG.audit_round(tampered, SERVER)
        with self.assertRaises(SeedIntegrityError):
            ProvablyFairRNG.audit_commitment(SERVER, "\u00fc" * 64)

    def test_verifier_js(self):
        js = generate_verification_js()
        self.assertIn("async function deriveRoll", js)
        self.assertIn(f"limit = {ROLL_SPACE}", js)
        self.assertIn("4294967296 % limit", js)
        self.assertNotIn("%%", js)


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    import logging
    logging.disable(logging.WARNING)

    unittest.main(verbosity=2)
