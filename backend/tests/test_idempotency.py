"""Tests for plan dedupe keys."""

import hashlib

from workout_ai.services.idempotency import derive_adaptive_key, derive_key, digest


def test_digest_is_sha256_of_compact_json():
    assert digest([1, "a"]) == hashlib.sha256(b'[1,"a"]').hexdigest()


def test_same_inputs_same_key():
    a = derive_key(1, "strength_training", 30, 2, ["bodyweight"], None)
    b = derive_key(1, "strength_training", 30, 2, ["bodyweight"], None)
    assert a == b
    assert len(a) == 64


def test_any_input_change_changes_key():
    base = derive_key(1, "strength_training", 30, 2, ["bodyweight"], "d" * 64)
    assert derive_key(2, "strength_training", 30, 2, ["bodyweight"], "d" * 64) != base
    assert derive_key(1, "hiit", 30, 2, ["bodyweight"], "d" * 64) != base
    assert derive_key(1, "strength_training", 45, 2, ["bodyweight"], "d" * 64) != base
    assert derive_key(1, "strength_training", 30, 3, ["bodyweight"], "d" * 64) != base
    assert derive_key(1, "strength_training", 30, 2, ["bodyweight"], "e" * 64) != base


def test_equipment_order_matters():
    assert derive_key(1, "t", 30, 2, ["a", "b"], None) != derive_key(1, "t", 30, 2, ["b", "a"], None)


def test_explicit_key_wins():
    assert derive_key(1, "t", 30, 2, [], None, explicit_key="client-key-123") == "client-key-123"


def test_adaptive_key_depends_on_source_plan():
    assert derive_adaptive_key(1, 10, 6, ["bodyweight"]) != derive_adaptive_key(1, 11, 6, ["bodyweight"])
    assert derive_adaptive_key(1, 10, 6, ["bodyweight"]) == derive_adaptive_key(1, 10, 6, ["bodyweight"])
