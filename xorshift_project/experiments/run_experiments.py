# experiments/run_experiments.py
# Automate experiments: vary samples and output truncation, collect success/time statistics
# Recovery runs in-process against freshly seeded engines, no oracle needed.

import argparse
import csv
import os
import random
import time

from ..attacker.recover import recover_state
from ..oracle.RNG128 import XorShift128


def truncate(value, output_bits, select='high'):
    if output_bits >= 32:
        return value
    if select == 'high':
        return value >> (32 - output_bits)
    return value & ((1 << output_bits) - 1)


def run_single(samples, output_bits, seed, select='high'):
    # success means the recovered state is the real one, not just a consistent one
    rng = XorShift128.from_seed(seed)
    truth = rng.copy()
    obs = [truncate(rng.next(), output_bits, select) for _ in range(samples)]
    t0 = time.time()
    recovered = recover_state(obs, output_bits, select)
    elapsed = time.time() - t0
    return recovered == truth, elapsed


def ensure_results_dir():
    os.makedirs('results', exist_ok=True)


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--samples_list', type=str, default='4,6,8,12,16', help='comma list')
    parser.add_argument('--output_bits_list', type=str, default='32,16,8,4', help='comma list')
    parser.add_argument('--trials', type=int, default=10, help='repeats per combo')
    parser.add_argument('--select', choices=['high', 'low'], default='high')
    parser.add_argument('--base_seed', type=int, default=None, help='seed for picking engine seeds')
    args = parser.parse_args()

    samples_list = [int(x) for x in args.samples_list.split(',')]
    output_bits_list = [int(x) for x in args.output_bits_list.split(',')]
    picker = random.Random(args.base_seed)
    ensure_results_dir()
    csv_path = os.path.join('results', f'experiments_{int(time.time())}.csv')
    with open(csv_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['samples', 'output_bits', 'trial', 'success', 'time_s'])
        for samples in samples_list:
            for output_bits in output_bits_list:
                for trial in range(args.trials):
                    seed = picker.getrandbits(32)
                    print(f"Running samples={samples}, output_bits={output_bits}, trial={trial}, seed={seed:08x}")
                    success, elapsed = run_single(samples, output_bits, seed, args.select)
                    writer.writerow([samples, output_bits, trial, int(success), f"{elapsed:.3f}"])
                    f.flush()
    print("Experiments complete. CSV saved at:", csv_path)
