"""
---
version: 0.1.0
created: 2026-10-19
updated: 2026-10-19
---

polyalpha_cracker.py — Break a repeating-key XOR file against a plaintext sample.

Reads the encrypted file and a sample text in the same language/domain,
reports the sample CI and the ranked key length candidates, recovers the key
and writes the decrypted data to <output>/decrypted.txt.

Usage:
    python3 polyalpha_cracker.py -t xor -i encrypted/xor-encrypted.js.txt -s samples/jquery.js
    python3 polyalpha_cracker.py -t xor -i encrypted/xor-encrypted.txt.hex -x -s samples/excerpt.txt
    python3 polyalpha_cracker.py -t xor -i secret.bin -s sample.txt -l 7 --char-set chars-256
"""

from __future__ import annotations

import argparse
import string
from pathlib import Path

from polyalpha import (
    DEFAULT_CHAR_SET, DEFAULT_MAX_LENGTH, DEFAULT_MIN_LENGTH, DEFAULT_OUTPUT_DIR,
    OUTPUT_FILENAME, SEPARATOR, CharSet, CipherType, CrackResult,
    __version__, crack, format_candidates, format_key, plot_ci_by_length, to_pct,
)


# ============================================================================
# 1. INPUT
# ============================================================================

def decode_hex(text: bytes) -> bytes:
    """
    Decode hexadecimal text to bytes, ignoring anything that is not a hex
    digit (newlines, spaces).

    Raises:
        ValueError: If an odd number of hex digits remains.
    """
    digits = bytes(c for c in text if chr(c) in string.hexdigits)
    if len(digits) % 2:
        raise ValueError(f"Hex input has an odd number of digits ({len(digits)})")
    return bytes.fromhex(digits.decode("ascii"))


def load_inputs(input_path: str | Path, sample_path: str | Path, hexa: bool = False) -> tuple[bytes, bytes]:
    """Read ciphertext and sample as raw bytes."""
    ciphertext = Path(input_path).read_bytes()
    sample = Path(sample_path).read_bytes()
    if hexa:
        ciphertext = decode_hex(ciphertext)
    return ciphertext, sample


# ============================================================================
# 2. OUTPUT
# ============================================================================

def write_output(plaintext: bytes, output_dir: str | Path) -> Path:
    """Write decrypted data to <output_dir>/decrypted.txt, creating the directory."""
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / OUTPUT_FILENAME
    path.write_bytes(plaintext)
    return path


def print_report(result: CrackResult) -> None:
    """Print the key length analysis and recovered key."""
    if result.estimate is None:
        print(f"Using Key Length: {result.key_length}")
        print(SEPARATOR)
    else:
        print(f"Sample Coincidence Index (CI): {to_pct(result.sample_ci, 3)}")
        print(SEPARATOR)
        print(format_candidates(result.estimate))
        print(SEPARATOR)
        print(f"Most probable Key Length: {result.key_length}")
        print(SEPARATOR)

    print(f"Most probable Key: {format_key(result.key)}")
    print(f"Key (hex): {result.key.hex()}")
    print(SEPARATOR)


# ============================================================================
# MAIN
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crack repeating-key XOR encryption using a plaintext sample",
        epilog="example: python3 polyalpha_cracker.py -t xor -i encrypted.hex -x -s sample.txt",
    )
    parser.add_argument("-i", "--input", required=True,
                        help="The input data file to decrypt")
    parser.add_argument("-s", "--sample", required=True,
                        help="The sample data to compare against crypted data")
    parser.add_argument("-t", "--type", required=True,
                        choices=[t.value for t in CipherType],
                        help="Type of polyalphabetical encryption to crack")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT_DIR,
                        help=f"The output folder for decrypted data (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("-l", "--length", type=int, default=None,
                        help="The length of the key (skips key length estimation)")
    parser.add_argument("-x", "--hexa", action="store_true",
                        help="Consume the encrypted data as hexadecimal text")
    parser.add_argument("--char-set", default=DEFAULT_CHAR_SET.value,
                        choices=[c.value for c in CharSet],
                        help=f"Char set to consider (default: {DEFAULT_CHAR_SET.value})")
    parser.add_argument("--min", type=int, default=DEFAULT_MIN_LENGTH,
                        help=f"The minimum key length to try out (default: {DEFAULT_MIN_LENGTH})")
    parser.add_argument("--max", type=int, default=DEFAULT_MAX_LENGTH,
                        help=f"The maximum key length to try out (default: {DEFAULT_MAX_LENGTH})")
    parser.add_argument("--plot", type=str, default=None,
                        help="Save a chart of average CI per key length to this path")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    char_set = CharSet(args.char_set)
    if args.plot and args.length is not None:
        parser.error("--plot charts the key length estimation; it cannot be combined with -l")

    print(SEPARATOR)

    try:
        ciphertext, sample = load_inputs(args.input, args.sample, args.hexa)
        result = crack(
            ciphertext,
            sample,
            alphabet_size=char_set.size,
            key_length=args.length,
            min_length=args.min,
            max_length=args.max,
        )
    except OSError as err:
        parser.error(f"cannot read input: {err}")
    except ValueError as err:
        parser.error(str(err))

    print_report(result)

    if args.plot and result.estimate is not None:
        plot_ci_by_length(result.estimate, args.plot)

    try:
        path = write_output(result.plaintext, args.output)
    except OSError as err:
        parser.error(f"cannot write output: {err}")
    print(f"Decrypted data written in {path}")


if __name__ == "__main__":
    main()
