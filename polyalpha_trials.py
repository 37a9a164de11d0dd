"""
---
version: 0.1.0
created: 2026-10-19
updated: 2026-10-19
---

polyalpha_trials.py — Monte Carlo check of key length and key recovery.

Repeatedly takes a random window of the sample text, encrypts it with a
random repeating XOR key of random length, and runs the cracker against the
full sample. Tallies how often:
  1. the key length is found exactly
  2. the chosen length is a multiple of the true length (aligned columns)
  3. the key is recovered exactly
  4. the plaintext is recovered exactly

Key length recovery is statistical: multiples of the true length also align
the columns, and short windows give noisy CIs.

Usage:
    python3 polyalpha_trials.py -s samples/excerpt.txt [--n-trials N] [--window W] [--seed S]
"""

from __future__ import annotations

import argparse
import time
from pathlib import Path

import numpy as np

from polyalpha import (
    DEFAULT_CHAR_SET, DEFAULT_MAX_LENGTH, CharSet,
    as_codes, check_alphabet, crack, xor_encrypt,
)


def run_trials(
    sample: bytes,
    n_trials: int = 200,
    window: int = 600,
    max_key: int = 8,
    alphabet_size: int = DEFAULT_CHAR_SET.size,
    max_length: int = DEFAULT_MAX_LENGTH,
    seed: int = 42,
) -> dict:
    """
    Encrypt random sample windows with random keys and try to crack them.

    Args:
        sample: Plaintext sample; windows are drawn from it and it also
            serves as the reference distribution.
        n_trials: Number of synthetic ciphertexts.
        window: Length of each plaintext window.
        max_key: Key lengths are drawn uniformly from [1, max_key].
        alphabet_size: Profiling alphabet; key bytes are drawn below it.
        max_length: Upper bound of the key length search.
        seed: Seed for numpy's default_rng.

    Returns:
        dict with n, exact_length, multiple_length, exact_key,
        exact_plaintext counts and a per-trial list.

    Raises:
        ValueError: If the window does not fit the sample or cannot hold
            two characters per column for the longest key.
    """
    sample = bytes(sample)
    if window > len(sample):
        raise ValueError(f"Window {window} is longer than the sample ({len(sample)} bytes)")
    if window < 2 * max_key:
        raise ValueError(f"Window {window} is too short for keys up to {max_key} bytes")
    if max_key > max_length:
        raise ValueError(f"max_key {max_key} exceeds the search bound {max_length}")
    check_alphabet(as_codes(sample), alphabet_size)

    rng = np.random.default_rng(seed)
    trials: list[dict] = []
    t0 = time.time()

    for i in range(n_trials):
        if (i + 1) % 50 == 0:
            elapsed = time.time() - t0
            rate = (i + 1) / elapsed if elapsed > 0 else 0
            print(f"  Trial {i+1}/{n_trials} ({rate:.0f}/s)", end="\r")

        start = int(rng.integers(0, len(sample) - window + 1))
        plaintext = sample[start:start + window]
        key_length = int(rng.integers(1, max_key + 1))
        key = bytes(int(b) for b in rng.integers(1, alphabet_size, size=key_length))
        ciphertext = xor_encrypt(plaintext, key)

        result = crack(ciphertext, sample, alphabet_size, min_length=1, max_length=max_length)

        trials.append({
            "key_length": key_length,
            "found_length": result.key_length,
            "exact_length": result.key_length == key_length,
            "multiple_length": result.key_length % key_length == 0,
            "exact_key": result.key == key,
            "exact_plaintext": result.plaintext == plaintext,
        })

    elapsed = time.time() - t0
    if n_trials >= 50:
        print(f"\n  {len(trials)} trials in {elapsed:.1f}s")

    return {
        "n": len(trials),
        "exact_length": sum(t["exact_length"] for t in trials),
        "multiple_length": sum(t["multiple_length"] for t in trials),
        "exact_key": sum(t["exact_key"] for t in trials),
        "exact_plaintext": sum(t["exact_plaintext"] for t in trials),
        "trials": trials,
    }


def print_trials(results: dict) -> None:
    """Print recovery rates overall and per true key length."""
    n = results["n"]
    print(f"\n{'='*70}")
    print(f"RECOVERY RATES ({n} trials)")
    print(f"{'='*70}")
    if n == 0:
        print("  No trials completed.")
        return

    for label, key in [
        ("Exact key length", "exact_length"),
        ("Multiple of key length", "multiple_length"),
        ("Exact key", "exact_key"),
        ("Exact plaintext", "exact_plaintext"),
    ]:
        print(f"  {label:<25} {results[key]:>6}/{n}  ({results[key] / n:.1%})")

    print(f"\n  {'Key len':>7} {'Trials':>7} {'Length':>8} {'Key':>8}")
    print("  " + "-" * 34)
    by_length: dict[int, list[dict]] = {}
    for t in results["trials"]:
        by_length.setdefault(t["key_length"], []).append(t)
    for key_length in sorted(by_length):
        rows = by_length[key_length]
        length_ok = np.mean([t["exact_length"] for t in rows])
        key_ok = np.mean([t["exact_key"] for t in rows])
        print(f"  {key_length:>7} {len(rows):>7} {length_ok:>8.1%} {key_ok:>8.1%}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Monte Carlo check of repeating-key XOR cracking")
    parser.add_argument("-s", "--sample", required=True, help="Sample plaintext file")
    parser.add_argument("--n-trials", type=int, default=200, help="Number of synthetic ciphertexts")
    parser.add_argument("--window", type=int, default=600, help="Plaintext window length")
    parser.add_argument("--max-key", type=int, default=8, help="Longest random key")
    parser.add_argument("--char-set", default=DEFAULT_CHAR_SET.value,
                        choices=[c.value for c in CharSet], help="Char set to consider")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    try:
        sample = Path(args.sample).read_bytes()
    except OSError as err:
        parser.error(f"cannot read sample: {err}")

    print("=" * 70)
    print("MONTE CARLO KEY RECOVERY")
    print(f"Trials: {args.n_trials}, window: {args.window}, keys up to {args.max_key} bytes")
    print("=" * 70)

    try:
        results = run_trials(
            sample,
            n_trials=args.n_trials,
            window=args.window,
            max_key=args.max_key,
            alphabet_size=CharSet(args.char_set).size,
            seed=args.seed,
        )
    except ValueError as err:
        parser.error(str(err))

    print_trials(results)


if __name__ == "__main__":
    main()
