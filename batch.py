# batch.py
# Compress and decompress a list of text files, one at a time.

"""
Batch driver: count -> tree -> codes -> compress -> decompress -> verify,
for every file given on the command line.

A failure on one file is logged and recorded in that file's row; the rest of
the batch still runs.

How to run:
  python batch.py notes.txt constitution.txt --outdir out
  python batch.py data/*.txt --outdir out --csv out/results.csv -v
"""

from __future__ import annotations

import argparse
import csv
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import List, Optional

from compressor import compress_file, count_frequencies, decompress_file
from errors import HuffmanError
from huffman import build_huffman_tree, generate_huffman_codes

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    file: str
    unique_symbols: int = 0
    original_bytes: int = 0
    compressed_bytes: int = 0
    code_bits: int = 0
    compression_ratio: float = 0.0
    ok: bool = False
    error: str = ""


def process_file(path: Path, outdir: Path, encoding: str = "utf-8", verify: bool = True) -> FileResult:
    """Run the full pipeline on one file. Never raises for per-file failures."""
    result = FileResult(file=str(path))
    compressed_path = outdir / f"{path.stem}.huff"
    decompressed_path = outdir / f"{path.stem}.decompressed.txt"

    try:
        ft = count_frequencies(path, encoding=encoding)
        root = build_huffman_tree(ft)
        code_map = generate_huffman_codes(root)
        result.unique_symbols = len(ft)

        result.code_bits = compress_file(code_map, path, compressed_path, encoding=encoding)
        decompress_file(compressed_path, decompressed_path, root, encoding=encoding)

        result.original_bytes = path.stat().st_size
        result.compressed_bytes = compressed_path.stat().st_size
        result.compression_ratio = result.compressed_bytes / max(1, result.original_bytes)

        if verify:
            with open(path, "r", encoding=encoding, newline="") as f:
                original = f.read()
            with open(decompressed_path, "r", encoding=encoding, newline="") as f:
                restored = f.read()
            if restored != original:
                raise HuffmanError("decompressed text does not match the original")
        result.ok = True
    except (OSError, HuffmanError, ValueError) as exc:
        logger.error("failed on %s: %s", path, exc)
        result.error = f"{type(exc).__name__}: {exc}"
    return result


def run_batch(paths: List[Path], outdir: Path, encoding: str = "utf-8", verify: bool = True) -> List[FileResult]:
    outdir.mkdir(parents=True, exist_ok=True)
    return [process_file(p, outdir, encoding=encoding, verify=verify) for p in paths]


def write_results(path: Path, results: List[FileResult]) -> None:
    names = [f.name for f in fields(FileResult)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in results:
            w.writerow({k: getattr(r, k) for k in names})


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman-compress text files and check the round trip")
    ap.add_argument("files", nargs="+", help="Text files to compress")
    ap.add_argument("--outdir", type=str, default="out", help="Directory for .huff and decompressed files")
    ap.add_argument("--encoding", type=str, default="utf-8", help="Text encoding of the input files")
    ap.add_argument("--no-verify", action="store_true", help="Skip comparing decompressed text to the input")
    ap.add_argument("--csv", type=str, default=None, help="Also write one result row per file to this CSV")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    results = run_batch([Path(p) for p in args.files], Path(args.outdir),
                        encoding=args.encoding, verify=not args.no_verify)

    for r in results:
        if r.ok:
            print(f"{r.file}: {r.original_bytes} -> {r.compressed_bytes} bytes "
                  f"(ratio {r.compression_ratio:.3f}, {r.unique_symbols} symbols)")
        else:
            print(f"{r.file}: FAILED ({r.error})")

    if args.csv:
        write_results(Path(args.csv), results)
        print(f"Wrote {len(results)} rows to {args.csv}")

    failed = sum(1 for r in results if not r.ok)
    print(f"{len(results) - failed}/{len(results)} files round-tripped")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
