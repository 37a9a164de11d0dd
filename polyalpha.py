"""
---
version: 0.1.0
created: 2026-10-19
updated: 2026-10-19
---

polyalpha.py — Shared module for repeating-key XOR cryptanalysis.

Given a ciphertext and a plaintext sample from the same language or domain,
estimate the key length from coincidence indices, recover each key byte by
matching per-column frequency distributions against the sample, and decrypt.

Seven sections:
  1. Constants (char sets, cipher types, CLI defaults)
  2. Errors
  3. Profiling (histogram, coincidence index, frequency distribution)
  4. Key length estimation
  5. Key recovery
  6. Decryption and the full crack pipeline
  7. Output utils (formatting, plots)
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Sequence, Union

import numpy as np
from scipy.spatial.distance import cdist

__version__ = "0.1.0"

# ============================================================================
# 1. CONSTANTS
# ============================================================================

SEPARATOR = "----------"

DEFAULT_MIN_LENGTH = 1
DEFAULT_MAX_LENGTH = 15
DEFAULT_OUTPUT_DIR = "output"
OUTPUT_FILENAME = "decrypted.txt"


class CharSet(Enum):
    """Alphabets the profiler can work over, keyed by their CLI name."""

    ASCII_128 = "ascii-128"
    CHARS_256 = "chars-256"

    @property
    def size(self) -> int:
        return 128 if self is CharSet.ASCII_128 else 256


class CipherType(Enum):
    XOR = "xor"


DEFAULT_CHAR_SET = CharSet.ASCII_128

# Anything the profiler accepts as text: raw bytes, a str of code points,
# or a plain sequence of integer codes.
Text = Union[bytes, bytearray, memoryview, str, Sequence[int], np.ndarray]


# ============================================================================
# 2. ERRORS
# ============================================================================

class PolyalphaError(ValueError):
    """Base class for every precondition the analysis refuses to run past."""


class AlphabetOverflowError(PolyalphaError):
    """A code point falls outside the chosen alphabet."""


class DegenerateWindowError(PolyalphaError):
    """A text window is too short for the requested statistic."""


class EmptyInputError(PolyalphaError):
    """Ciphertext, sample or key is empty."""


class InvalidKeyLengthRangeError(PolyalphaError):
    """The key length range is malformed or yields no scorable candidate."""


# ============================================================================
# 3. PROFILING — Histograms, coincidence index, frequency distribution
# ============================================================================

def as_codes(text: Text) -> np.ndarray:
    """Normalise bytes, str or an int sequence to a 1-D int64 array of codes."""
    if isinstance(text, (bytes, bytearray, memoryview)):
        return np.frombuffer(bytes(text), dtype=np.uint8).astype(np.int64)
    if isinstance(text, str):
        return np.fromiter((ord(c) for c in text), dtype=np.int64, count=len(text))
    return np.asarray(text, dtype=np.int64).reshape(-1)


def check_alphabet_size(alphabet_size: int) -> None:
    """
    Reject alphabet sizes other than those of CharSet.

    Both are powers of two no larger than 256, so XOR-ing two in-alphabet
    codes stays inside the alphabet and every code fits in a byte.
    """
    sizes = sorted(c.size for c in CharSet)
    if alphabet_size not in sizes:
        raise PolyalphaError(
            f"Alphabet size must be one of {sizes}, got {alphabet_size}"
        )


def check_alphabet(codes: np.ndarray, alphabet_size: int) -> None:
    """Raise AlphabetOverflowError if any code is outside [0, alphabet_size)."""
    if codes.size == 0:
        return
    lo = int(codes.min())
    hi = int(codes.max())
    if lo < 0:
        raise AlphabetOverflowError(f"Negative code point {lo} in input")
    if hi >= alphabet_size:
        raise AlphabetOverflowError(
            f"Code point {hi} does not fit an alphabet of size {alphabet_size}; "
            f"use a larger char set"
        )


def histogram(text: Text, alphabet_size: int) -> np.ndarray:
    """
    Count occurrences of each code point.

    Args:
        text: Input text (bytes, str or int sequence).
        alphabet_size: Number of slots in the histogram.

    Returns:
        int64 array of length alphabet_size; its sum equals len(text).

    Raises:
        AlphabetOverflowError: If a code point is >= alphabet_size.
    """
    codes = as_codes(text)
    check_alphabet(codes, alphabet_size)
    return np.bincount(codes, minlength=alphabet_size)


def coincidence_index(hist: np.ndarray, window_size: int) -> float:
    """
    Probability that two distinct positions drawn without replacement hold
    the same character: sum(c * (c - 1)) / (n * (n - 1)).

    English text over 128 codes sits around 0.06-0.07; uniform noise over
    the same alphabet is 1/128.

    Raises:
        DegenerateWindowError: If window_size < 2 (the ratio is undefined).
    """
    if window_size < 2:
        raise DegenerateWindowError(
            f"Coincidence index needs at least 2 characters, got {window_size}"
        )
    counts = np.asarray(hist, dtype=np.int64)
    pairs = int(np.sum(counts * (counts - 1)))
    return pairs / (window_size * (window_size - 1))


def frequency_distribution(hist: np.ndarray, window_size: int) -> np.ndarray:
    """Normalise a histogram to per-slot frequencies (count / window_size)."""
    if window_size < 1:
        raise DegenerateWindowError("Frequency distribution of an empty window is undefined")
    return np.asarray(hist, dtype=np.float64) / window_size


def text_coincidence_index(text: Text, alphabet_size: int) -> float:
    """Coincidence index of a whole text."""
    codes = as_codes(text)
    return coincidence_index(histogram(codes, alphabet_size), codes.size)


def text_frequency_distribution(text: Text, alphabet_size: int) -> np.ndarray:
    """Frequency distribution of a whole text."""
    codes = as_codes(text)
    return frequency_distribution(histogram(codes, alphabet_size), codes.size)


# ============================================================================
# 4. KEY LENGTH ESTIMATION
# ============================================================================

@dataclass(frozen=True)
class KeyLengthCandidate:
    length: int
    # None when some column holds fewer than 2 characters.
    average_ci: float | None


@dataclass(frozen=True)
class KeyLengthEstimate:
    target_ci: float
    candidates: list[KeyLengthCandidate]  # ranked, best first
    best_length: int

    @property
    def best(self) -> KeyLengthCandidate:
        return self.candidates[0]


def _check_length_range(min_length: int, max_length: int) -> None:
    if min_length < 1:
        raise InvalidKeyLengthRangeError(f"Minimum key length must be >= 1, got {min_length}")
    if min_length > max_length:
        raise InvalidKeyLengthRangeError(
            f"Minimum key length {min_length} exceeds maximum {max_length}"
        )


def average_column_ci(codes: np.ndarray, length: int, alphabet_size: int) -> float | None:
    """
    Split codes into `length` columns by index mod length and return the
    unweighted mean of the column coincidence indices.

    Returns None when any column has fewer than 2 characters.
    """
    total = 0.0
    for k in range(length):
        column = codes[k::length]
        if column.size < 2:
            return None
        total += coincidence_index(np.bincount(column, minlength=alphabet_size), column.size)
    return total / length


def key_length_candidates(
    ciphertext: Text,
    alphabet_size: int,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> list[KeyLengthCandidate]:
    """
    Score every key length in [min_length, max_length], ascending.

    When the tested length matches the real key length, each column was
    XOR-ed with a single byte. XOR is a bijection on the column, so the
    column keeps the coincidence structure of the plaintext language.
    Wrong lengths mix several key bytes per column and flatten the CI.
    """
    _check_length_range(min_length, max_length)
    check_alphabet_size(alphabet_size)
    codes = as_codes(ciphertext)
    if codes.size == 0:
        raise EmptyInputError("Ciphertext is empty")
    check_alphabet(codes, alphabet_size)
    return [
        KeyLengthCandidate(length, average_column_ci(codes, length, alphabet_size))
        for length in range(min_length, max_length + 1)
    ]


def rank_key_lengths(
    candidates: Sequence[KeyLengthCandidate],
    target_ci: float,
) -> list[KeyLengthCandidate]:
    """
    Order candidates by |average_ci - target_ci|, closest first.

    Candidates without a defined CI always come last. Equal distances are
    broken by the smaller key length.
    """
    def rank_key(c: KeyLengthCandidate) -> tuple[int, float, int]:
        if c.average_ci is None:
            return (1, math.inf, c.length)
        return (0, abs(c.average_ci - target_ci), c.length)

    return sorted(candidates, key=rank_key)


def estimate_key_length(
    ciphertext: Text,
    target_ci: float,
    alphabet_size: int,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> KeyLengthEstimate:
    """
    Pick the key length whose average column CI is closest to target_ci
    (usually the sample's own CI).

    Raises:
        InvalidKeyLengthRangeError: If the range is malformed, or every
            length in it leaves some column with fewer than 2 characters.
    """
    candidates = key_length_candidates(ciphertext, alphabet_size, min_length, max_length)
    ranked = rank_key_lengths(candidates, target_ci)
    if ranked[0].average_ci is None:
        raise InvalidKeyLengthRangeError(
            f"No key length in [{min_length}, {max_length}] leaves 2 or more "
            f"characters per column of a {as_codes(ciphertext).size}-character ciphertext"
        )
    return KeyLengthEstimate(
        target_ci=target_ci,
        candidates=ranked,
        best_length=ranked[0].length,
    )


# ============================================================================
# 5. KEY RECOVERY
# ============================================================================

@dataclass(frozen=True)
class KeyByteCandidate:
    byte_value: int
    distance: float


def key_byte_distances(
    column: Text,
    sample_freq: np.ndarray,
    alphabet_size: int,
) -> np.ndarray:
    """
    Squared Euclidean distance, for every candidate byte v, between the
    frequency distribution of (column XOR v) and the sample distribution.

    Returns:
        float array of length alphabet_size indexed by v.
    """
    check_alphabet_size(alphabet_size)
    sample_freq = np.asarray(sample_freq, dtype=np.float64)
    if sample_freq.shape != (alphabet_size,):
        raise ValueError(
            f"Sample distribution has {sample_freq.size} slots, expected {alphabet_size}"
        )
    codes = as_codes(column)
    if codes.size == 0:
        raise DegenerateWindowError("Cannot recover a key byte from an empty column")
    counts = histogram(codes, alphabet_size)

    # (column ^ v) holds character i exactly as often as column holds i ^ v.
    slots = np.arange(alphabet_size)
    shifted = counts[slots[:, None] ^ slots[None, :]] / codes.size
    return cdist(shifted, sample_freq[None, :], "sqeuclidean")[:, 0]


def key_byte_candidates(
    column: Text,
    sample_freq: np.ndarray,
    alphabet_size: int,
) -> list[KeyByteCandidate]:
    """All candidate bytes for one column, best first (ties: smaller byte)."""
    distances = key_byte_distances(column, sample_freq, alphabet_size)
    order = sorted(range(alphabet_size), key=lambda v: (distances[v], v))
    return [KeyByteCandidate(v, float(distances[v])) for v in order]


def recover_key_byte(
    column: Text,
    sample_freq: np.ndarray,
    alphabet_size: int,
) -> KeyByteCandidate:
    """The byte whose decryption of the column best matches the sample."""
    return key_byte_candidates(column, sample_freq, alphabet_size)[0]


def recover_key(
    ciphertext: Text,
    key_length: int,
    sample_freq: np.ndarray,
    alphabet_size: int,
) -> bytes:
    """
    Recover a key of key_length bytes, one independent search per column.

    Raises:
        InvalidKeyLengthRangeError: If key_length < 1.
        DegenerateWindowError: If key_length exceeds the ciphertext length.
    """
    if key_length < 1:
        raise InvalidKeyLengthRangeError(f"Key length must be >= 1, got {key_length}")
    codes = as_codes(ciphertext)
    if codes.size == 0:
        raise EmptyInputError("Ciphertext is empty")
    if key_length > codes.size:
        raise DegenerateWindowError(
            f"Key length {key_length} exceeds ciphertext length {codes.size}"
        )
    check_alphabet(codes, alphabet_size)
    return bytes(
        recover_key_byte(codes[k::key_length], sample_freq, alphabet_size).byte_value
        for k in range(key_length)
    )


# ============================================================================
# 6. DECRYPTION & PIPELINE
# ============================================================================

def xor_decrypt(data: bytes, key: bytes) -> bytes:
    """
    Repeating-key XOR: out[i] = data[i] ^ key[i % len(key)].

    Applying it twice with the same key returns the input.
    """
    key = bytes(key)
    if not key:
        raise EmptyInputError("Key is empty")
    buf = np.frombuffer(bytes(data), dtype=np.uint8)
    if buf.size == 0:
        return b""
    stream = np.resize(np.frombuffer(key, dtype=np.uint8), buf.size)
    return (buf ^ stream).tobytes()


xor_encrypt = xor_decrypt


@dataclass(frozen=True)
class CrackResult:
    sample_ci: float | None
    estimate: KeyLengthEstimate | None
    key_length: int
    key: bytes
    plaintext: bytes


def crack(
    ciphertext: Text,
    sample: Text,
    alphabet_size: int = DEFAULT_CHAR_SET.size,
    key_length: int | None = None,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> CrackResult:
    """
    Full pipeline: profile the sample, estimate the key length (unless
    given), recover the key and decrypt.

    Args:
        ciphertext: Encrypted data.
        sample: Representative plaintext in the same language/domain.
        alphabet_size: 128 or 256 (see CharSet).
        key_length: Fixed key length; skips estimation when given.
        min_length, max_length: Inclusive key length search range.

    Returns:
        CrackResult with the sample CI and ranked candidates (None when
        key_length was given), the key and the decrypted bytes.
    """
    check_alphabet_size(alphabet_size)
    codes = as_codes(ciphertext)
    sample_codes = as_codes(sample)
    if codes.size == 0:
        raise EmptyInputError("Ciphertext is empty")
    if sample_codes.size == 0:
        raise EmptyInputError("Sample is empty")
    check_alphabet(codes, alphabet_size)
    sample_hist = histogram(sample_codes, alphabet_size)
    sample_freq = frequency_distribution(sample_hist, sample_codes.size)

    sample_ci = None
    estimate = None
    if key_length is None:
        sample_ci = coincidence_index(sample_hist, sample_codes.size)
        estimate = estimate_key_length(codes, sample_ci, alphabet_size, min_length, max_length)
        key_length = estimate.best_length

    key = recover_key(codes, key_length, sample_freq, alphabet_size)
    plaintext = xor_decrypt(codes.astype(np.uint8).tobytes(), key)
    return CrackResult(
        sample_ci=sample_ci,
        estimate=estimate,
        key_length=key_length,
        key=key,
        plaintext=plaintext,
    )


# ============================================================================
# 7. OUTPUT UTILS — Formatting, plots
# ============================================================================

def to_pct(x: float, digits: int = 2) -> str:
    """Format a fraction as a percentage, truncated (not rounded) to `digits`."""
    scale = 10 ** digits
    return f"{math.trunc(100 * scale * x) / scale:.{digits}f}%"


def format_key(key: bytes) -> str:
    """Printable ASCII as-is, everything else as \\xNN."""
    return "".join(chr(b) if 32 <= b < 127 else f"\\x{b:02x}" for b in key)


def format_candidates(estimate: KeyLengthEstimate) -> str:
    """One line per candidate in rank order, the chosen length marked."""
    lines: list[str] = []
    for c in estimate.candidates:
        ci = to_pct(c.average_ci, 3) if c.average_ci is not None else "n/a"
        mark = " <---" if c.length == estimate.best_length else ""
        lines.append(f"CI for key length {c.length:04d}: {ci}{mark}")
    return "\n".join(lines)


def plot_ci_by_length(
    estimate: KeyLengthEstimate,
    save_path: str | Path | None = None,
) -> None:
    """
    Bar chart of average column CI per key length against the sample CI.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        warnings.warn("matplotlib not available; skipping plot")
        return

    by_length = sorted(estimate.candidates, key=lambda c: c.length)
    lengths = [c.length for c in by_length]
    values = [c.average_ci or 0.0 for c in by_length]
    colors = ["red" if c.length == estimate.best_length else "steelblue" for c in by_length]

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(lengths, values, color=colors, alpha=0.8)
    ax.axhline(estimate.target_ci, color="orange", linestyle="--",
               label=f"Sample CI ({to_pct(estimate.target_ci, 3)})")
    ax.set_title(f"Average column CI per key length (best: {estimate.best_length})")
    ax.set_xlabel("Key length")
    ax.set_ylabel("Coincidence index")
    ax.set_xticks(lengths)
    ax.legend(fontsize=8)

    plt.tight_layout()
    if save_path:
        plt.savefig(str(save_path), dpi=150, bbox_inches="tight")
        print(f"Saved: {save_path}")
    else:
        plt.show()
    plt.close(fig)


# ============================================================================
# SELF-TEST — Run when executed directly
# ============================================================================

_SELF_TEST_TEXT = (
    "It was late in the afternoon when the surveyors reached the river, and "
    "the light had already begun to fail over the water. They made camp on "
    "the eastern bank, where the ground was dry and the trees gave some "
    "shelter from the wind. The older of the two men unpacked the instruments "
    "with great care, while the younger gathered wood and set about building "
    "a fire. Neither of them spoke for a long while. There was nothing that "
    "needed saying, and both were tired from the long walk through the hills. "
    "When the fire was burning well they ate a little bread and cheese, and "
    "then sat watching the river as the last of the daylight went out of it. "
    "In the morning they would measure the crossing and mark the place where "
    "the new bridge was to stand, but for now there was only the sound of the "
    "water and the small noises of the fire settling into its coals."
)


def _self_test() -> None:
    """Round-trip a known key through the full pipeline."""
    print("=== polyalpha.py self-test ===\n")

    # 1. CI examples
    assert text_coincidence_index(b"aaaa", 128) == 1.0
    assert text_coincidence_index(b"abcd", 128) == 0.0
    print("CI examples: PASS")

    # 2. Percentage truncation
    assert to_pct(0.123456, 3) == "12.345%", to_pct(0.123456, 3)
    print("Percentage truncation: PASS")

    # 3. Two-byte key, same sample
    sample = _SELF_TEST_TEXT.encode("ascii")
    ciphertext = xor_encrypt(sample, b"AB")
    key = recover_key(ciphertext, 2, text_frequency_distribution(sample, 128), 128)
    print(f"Recovered key: {format_key(key)}")
    assert key == b"AB", f"Key recovery FAILED: got {key!r}"

    # 4. Full pipeline with an unknown key length
    ciphertext = xor_encrypt(sample, b"K3y!z")
    result = crack(ciphertext, sample, 128, min_length=1, max_length=9)
    print()
    print(f"Sample CI: {to_pct(result.sample_ci, 3)}")
    print(format_candidates(result.estimate))
    print(f"Recovered key: {format_key(result.key)}")
    assert result.key_length == 5, f"Key length FAILED: got {result.key_length}"
    assert result.plaintext == sample, "Decryption FAILED"

    print("\n=== Self-test complete ===")


if __name__ == "__main__":
    _self_test()
