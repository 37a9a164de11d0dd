from __future__ import annotations

import numpy as np
import pytest

from polyalpha import (
    AlphabetOverflowError, DegenerateWindowError,
    as_codes, coincidence_index, frequency_distribution, histogram,
    text_coincidence_index, text_frequency_distribution,
)


def test_as_codes_accepts_bytes_str_and_ints():
    assert as_codes(b"AB").tolist() == [65, 66]
    assert as_codes("AB").tolist() == [65, 66]
    assert as_codes([65, 66]).tolist() == [65, 66]
    assert as_codes(b"").size == 0


def test_histogram_counts_every_slot():
    hist = histogram(b"abca", 128)
    assert hist.shape == (128,)
    assert hist[ord("a")] == 2
    assert hist[ord("b")] == 1
    assert hist[ord("c")] == 1
    assert hist.sum() == 4


def test_histogram_of_empty_text_is_all_zero():
    hist = histogram(b"", 256)
    assert hist.shape == (256,)
    assert hist.sum() == 0


def test_histogram_rejects_code_outside_alphabet():
    with pytest.raises(AlphabetOverflowError, match="128"):
        histogram(b"abc\x80", 128)
    with pytest.raises(AlphabetOverflowError):
        histogram([-1, 3], 128)
    with pytest.raises(AlphabetOverflowError):
        histogram("café", 128)


def test_histogram_256_accepts_high_bytes():
    hist = histogram(bytes([0, 255, 255]), 256)
    assert hist[255] == 2


def test_coincidence_index_identical_characters():
    assert text_coincidence_index(b"aaaa", 128) == 1.0


def test_coincidence_index_distinct_characters():
    assert text_coincidence_index(b"abcd", 128) == 0.0


def test_coincidence_index_formula():
    # a:2 b:1 -> 2*1 / (3*2)
    assert text_coincidence_index(b"aab", 128) == pytest.approx(1 / 3)


def test_coincidence_index_bounds_on_random_text():
    rng = np.random.default_rng(7)
    for _ in range(20):
        codes = rng.integers(0, 128, size=int(rng.integers(2, 300)))
        ci = text_coincidence_index(codes, 128)
        assert 0.0 <= ci <= 1.0


@pytest.mark.parametrize("window", [0, 1])
def test_coincidence_index_degenerate_window(window):
    with pytest.raises(DegenerateWindowError):
        coincidence_index(np.zeros(128, dtype=np.int64), window)
    with pytest.raises(DegenerateWindowError):
        text_coincidence_index(b"a" * window, 128)


def test_english_ci_above_uniform(passage):
    ci = text_coincidence_index(passage, 128)
    assert ci > 3 / 128


def test_frequency_distribution_sums_to_one(passage):
    freq = text_frequency_distribution(passage, 128)
    assert freq.shape == (128,)
    assert freq.sum() == pytest.approx(1.0)
    assert freq[ord("e")] > freq[ord("z")]


def test_frequency_distribution_values():
    freq = frequency_distribution(histogram(b"aab", 128), 3)
    assert freq[ord("a")] == pytest.approx(2 / 3)
    assert freq[ord("b")] == pytest.approx(1 / 3)


def test_frequency_distribution_empty_window():
    with pytest.raises(DegenerateWindowError):
        frequency_distribution(np.zeros(128, dtype=np.int64), 0)
