# experiments.py
# Benchmark runs for the Huffman text coder

"""
Experiment runner: Huffman coding over synthetic text

Runs repeated experiments and writes data + charts

Outputs (in --outdir):
  - metrics.csv     (raw row per run)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 256 --exp2_max_kb 2048
  python experiments.py --outdir results --exp1_generators uniform95,zipf64,english_like --no_exp2
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Callable

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from compressor import compress_text, decompress_bytes, freq_table
from huffman import build_huffman_tree, generate_huffman_codes


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def entropy_bits(ft: Dict[object, int]) -> float:
    """Shannon entropy in bits per symbol, the lower bound for average code length"""
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return -sum((c / total) * math.log2(c / total) for c in ft.values())


# Synthetic dataset generators (text)

PRINTABLE = "".join(chr(i) for i in range(32, 127))

def _sample_cdf(rng: random.Random, chars: str, weights: List[float], size: int) -> str:
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)

    out = []
    for _ in range(size):
        r = rng.random()
        lo, hi = 0, len(cdf) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if r <= cdf[mid]:
                hi = mid
            else:
                lo = mid + 1
        out.append(chars[lo])
    return "".join(out)

def gen_uniform(size: int, alphabet: int = 95, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = PRINTABLE[:alphabet]
    return "".join(rng.choice(chars) for _ in range(size))

def gen_repetitive(size: int, dominant: str = "A", dom_frac: float = 0.90, seed: int = 0) -> str:
    rng = random.Random(seed)
    others = [c for c in PRINTABLE if c != dominant]
    return "".join(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 64, s: float = 1.2, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = PRINTABLE[:alphabet]
    weights = [1.0 / ((i + 1) ** s) for i in range(len(chars))]
    return _sample_cdf(rng, chars, weights, size)

def gen_english_like(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        "\n"
    )
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample_cdf(rng, chars, weights, size)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform95": lambda size, seed: gen_uniform(size, alphabet=95, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant="A", dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant="A", dom_frac=0.99, seed=seed),
    "single_char": lambda size, seed: "a" * size,
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size: int, seed: int) -> Tuple[str, str]:
    """
    Unknown dataset names fall back to uniform95, and the returned name says so
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_uniform95", gen_uniform(size, alphabet=95, seed=seed)
    return name, fn(size, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    input_chars: int
    run_id: int
    unique_symbols: int

    build_tree_ms: float
    build_codes_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    code_bits: int
    compressed_bytes: int
    pad_bits: int
    compression_ratio: float  # compressed bytes / input chars

    avg_code_length: float
    entropy_bits: float
    correctness_ok: int  # 1 or 0


def run_one(data: str) -> MetricRow:
    ft = freq_table(data)

    t0 = now_ns()
    root = build_huffman_tree(ft)
    t1 = now_ns()
    code_map = generate_huffman_codes(root)
    t2 = now_ns()

    packed = compress_text(data, code_map)
    t3 = now_ns()
    decoded = decompress_bytes(packed, root)
    t4 = now_ns()

    code_bits = sum(ft[s] * len(code_map[s]) for s in ft)
    pad_bits = (-code_bits) % 8

    build_tree_ms = ns_to_ms(t1 - t0)
    build_codes_ms = ns_to_ms(t2 - t1)
    encode_ms = ns_to_ms(t3 - t2)
    decode_ms = ns_to_ms(t4 - t3)

    return MetricRow(
        exp_name="",
        dataset_name="",
        input_chars=len(data),
        run_id=0,
        unique_symbols=len(ft),
        build_tree_ms=build_tree_ms,
        build_codes_ms=build_codes_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_tree_ms + build_codes_ms + encode_ms + decode_ms,
        code_bits=code_bits,
        compressed_bytes=len(packed),
        pad_bits=pad_bits,
        compression_ratio=len(packed) / max(1, len(data)),
        avg_code_length=code_bits / max(1, len(data)),
        entropy_bits=entropy_bits(ft),
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


SUMMARY_METRICS = ["compression_ratio", "avg_code_length", "encode_ms", "decode_ms", "build_tree_ms", "total_ms"]

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, input_chars and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.input_chars)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "input_chars", "n_runs", "entropy_bits"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size = key
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "input_chars": size,
                "n_runs": len(items),
                "entropy_bits": statistics.mean(x.entropy_bits for x in items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(row)


# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    plt.plot(x, [mean_for(d, "avg_code_length") for d in datasets], marker="o", label="huffman avg code length")
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="x", linestyle="--", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Code Length vs Entropy by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_code_length.png", dpi=200)
    plt.close()

    plt.figure()
    plt.plot(x, [mean_for(d, "compression_ratio") for d in datasets], marker="o")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Input Chars")
    plt.title("Experiment 1: Compression Ratio by Distribution")
    plt.tight_layout()
    plt.savefig(outdir / "exp1_compression_ratio.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.input_chars for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.input_chars == size]
            return statistics.mean(vals) if vals else float("nan")

        plt.figure()
        plt.plot(sizes, [mean_size(s, "encode_ms") for s in sizes], marker="o", label="encode")
        plt.plot(sizes, [mean_size(s, "decode_ms") for s in sizes], marker="o", label="decode")
        plt.xlabel("Input Size (chars)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Encode/Decode Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_time_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=128, help="Experiment 1 fixed input size in K chars")
    ap.add_argument("--exp1_generators", type=str, default="uniform95,zipf64,repetitive90,english_like,single_char",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in K chars (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=1024, help="Experiment 2 max size in K chars (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform95,english_like",
                    help="Comma-separated dataset generator names for experiment 2")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                row = run_one(data)
                row.exp_name = "exp1_distribution"
                row.dataset_name = dataset_name
                row.run_id = run_id
                rows.append(row)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        sizes: List[int] = []
        s = max(1, args.exp2_min_kb) * 1024
        while s <= max(1, args.exp2_max_kb) * 1024:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_dataset(gen_name, size, args.seed + 10_000 + size + run_id)
                    row = run_one(data)
                    row.exp_name = "exp2_size_scaling"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_experiment_1(rows, outdir)
        plot_experiment_2(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
