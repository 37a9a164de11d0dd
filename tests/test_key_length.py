from __future__ import annotations

import pytest

from polyalpha import (
    EmptyInputError, InvalidKeyLengthRangeError, KeyLengthCandidate,
    as_codes, average_column_ci, estimate_key_length, key_length_candidates,
    rank_key_lengths, text_coincidence_index, xor_encrypt,
)


def test_average_column_ci_is_unweighted_mean():
    # columns "aab" (CI 1/3) and "aa" (CI 1)
    assert average_column_ci(as_codes(b"aaaab"), 2, 128) == pytest.approx(2 / 3)
    # columns "aa" (CI 1) and "ab" (CI 0)
    assert average_column_ci(as_codes(b"aaab"), 2, 128) == pytest.approx(0.5)


def test_average_column_ci_undefined_for_short_columns():
    assert average_column_ci(as_codes(b"abc"), 2, 128) is None
    assert average_column_ci(as_codes(b"abc"), 4, 128) is None


def test_candidates_in_ascending_length_order():
    candidates = key_length_candidates(b"abcdefghij", 128, 1, 8)
    assert [c.length for c in candidates] == list(range(1, 9))
    assert candidates[0].average_ci is not None
    assert candidates[-1].average_ci is None


def test_rank_puts_undefined_last_and_breaks_ties_by_length():
    candidates = [
        KeyLengthCandidate(4, 0.75),
        KeyLengthCandidate(2, None),
        KeyLengthCandidate(3, 0.25),
        KeyLengthCandidate(1, 0.75),
    ]
    ranked = rank_key_lengths(candidates, 0.5)
    assert [c.length for c in ranked] == [1, 3, 4, 2]


def test_rank_closest_first():
    candidates = [KeyLengthCandidate(1, 0.02), KeyLengthCandidate(2, 0.06), KeyLengthCandidate(3, 0.04)]
    assert [c.length for c in rank_key_lengths(candidates, 0.065)] == [2, 3, 1]


def test_estimate_finds_key_length(passage):
    ciphertext = xor_encrypt(passage, b"K3y!z")
    target = text_coincidence_index(passage, 128)
    estimate = estimate_key_length(ciphertext, target, 128, 1, 9)
    assert estimate.best_length == 5
    assert estimate.best.length == 5
    assert estimate.target_ci == target
    assert sorted(c.length for c in estimate.candidates) == list(range(1, 10))


@pytest.mark.parametrize("start", [0, 600, 1200, 1800])
def test_estimate_picks_aligned_length_on_windows(passage, start):
    plaintext = passage[start:start + 900]
    ciphertext = xor_encrypt(plaintext, b"\x13W*`\x0f")
    target = text_coincidence_index(passage, 128)
    estimate = estimate_key_length(ciphertext, target, 128, 1, 15)
    # 10 and 15 align the columns too and can land closer to the sample CI.
    assert estimate.best_length % 5 == 0


def test_estimate_rejects_bad_ranges(passage):
    with pytest.raises(InvalidKeyLengthRangeError):
        estimate_key_length(passage, 0.06, 128, 5, 4)
    with pytest.raises(InvalidKeyLengthRangeError):
        estimate_key_length(passage, 0.06, 128, 0, 4)


def test_estimate_rejects_range_beyond_ciphertext():
    with pytest.raises(InvalidKeyLengthRangeError):
        estimate_key_length(b"abcde", 0.06, 128, 3, 15)


def test_estimate_skips_undefined_candidates():
    estimate = estimate_key_length(b"abcde", 0.0, 128, 1, 15)
    assert estimate.best_length in (1, 2)
    assert all(c.average_ci is None for c in estimate.candidates[2:])


def test_estimate_rejects_empty_ciphertext():
    with pytest.raises(EmptyInputError):
        estimate_key_length(b"", 0.06, 128)
