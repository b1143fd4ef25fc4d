#!/usr/bin/env python3
"""
Timing comparison of melfront FFT plans against numpy and scipy.

This script measures:
  1. Real FFT time per call for power-of-two and Bluestein lengths
  2. Spectrogram extraction time for a configured front end (--config)

Usage:
    python scripts/benchmark_fft.py [--sizes 400 512 1024] [--repeats 200]
    python scripts/benchmark_fft.py --config configs/whisper.yaml --seconds 30
"""

import argparse
import time
from typing import Callable, List, Tuple

import numpy as np
import scipy.fft
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from melfront import FFTPlanCache, SpectrogramExtractor
from melfront.utils import setup_logging

console = Console()


def time_call(fn: Callable[[], None], repeats: int) -> Tuple[float, float]:
    """Return mean and std of ``fn`` run time in microseconds."""
    fn()  # warm-up (Numba compilation, plan caches)
    times = []
    for _ in range(repeats):
        start = time.perf_counter()
        fn()
        times.append((time.perf_counter() - start) * 1e6)
    return float(np.mean(times)), float(np.std(times))


def benchmark_sizes(sizes: List[int], repeats: int, seed: int) -> Table:
    rng = np.random.default_rng(seed)
    plans = FFTPlanCache()

    table = Table(title="Real FFT time per call (us)", box=box.ROUNDED)
    table.add_column("N", justify="right", style="bold")
    table.add_column("Plan")
    table.add_column("melfront", justify="right")
    table.add_column("numpy", justify="right")
    table.add_column("scipy", justify="right")
    table.add_column("Max error", justify="right")

    for n in sizes:
        x = rng.standard_normal(n)
        plan = plans.get(n)
        out = plan.create_output_array()
        scratch = plan.create_scratch()

        ours, ours_std = time_call(lambda: plan.real_transform(out, x, scratch=scratch), repeats)
        ref_np, _ = time_call(lambda: np.fft.rfft(x), repeats)
        ref_sp, _ = time_call(lambda: scipy.fft.rfft(x), repeats)

        num_bins = n // 2 + 1
        ours_spec = out[0:2 * num_bins:2] + 1j * out[1:2 * num_bins:2]
        error = np.abs(ours_spec - scipy.fft.rfft(x)).max()

        table.add_row(
            str(n),
            "radix-4" if plan.is_power_of_two else "bluestein",
            f"{ours:.1f} ± {ours_std:.1f}",
            f"{ref_np:.1f}",
            f"{ref_sp:.1f}",
            f"{error:.2e}",
        )
    return table


def benchmark_extractor(config_path: str, seconds: float, repeats: int, seed: int) -> Table:
    extractor = SpectrogramExtractor.from_yaml(config_path)
    sampling_rate = extractor.config.sampling_rate
    waveform = np.random.default_rng(seed).standard_normal(int(seconds * sampling_rate))
    scratch = extractor.create_scratch()

    mean_us, std_us = time_call(lambda: extractor.extract(waveform, scratch=scratch), repeats)
    shape = extractor.output_shape(waveform.shape[0])

    table = Table(title=f"Spectrogram extraction ({config_path})", box=box.ROUNDED)
    table.add_column("Audio (s)", justify="right")
    table.add_column("Output shape", justify="right")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Real-time factor", justify="right")
    table.add_row(
        f"{seconds:.1f}",
        str(shape),
        f"{mean_us / 1000:.2f} ± {std_us / 1000:.2f}",
        f"{seconds / (mean_us / 1e6):.0f}x",
    )
    return table


def main():
    parser = argparse.ArgumentParser(description="FFT / spectrogram benchmark")
    parser.add_argument(
        '--sizes',
        type=int,
        nargs='+',
        default=[256, 400, 512, 1000, 1024, 2048],
        help='Transform lengths to benchmark'
    )
    parser.add_argument('--repeats', type=int, default=200, help='Timed calls per measurement')
    parser.add_argument('--config', type=str, default=None, help='Spectrogram YAML config to benchmark')
    parser.add_argument('--seconds', type=float, default=10.0, help='Audio length for --config')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--log-file', type=str, default=None, help='Optional log file')
    args = parser.parse_args()

    setup_logging(log_file=args.log_file)

    console.print(Panel.fit("[bold]melfront FFT benchmark[/bold]", border_style="blue"))
    console.print(benchmark_sizes(args.sizes, args.repeats, args.seed))

    if args.config:
        console.print(benchmark_extractor(args.config, args.seconds, max(1, args.repeats // 10), args.seed))


if __name__ == '__main__':
    main()
