# experiments/plot_heatmap.py
"""
Heatmap of state-recovery experiments: x = samples (observed outputs),
y = output_bits (bits of each 32-bit output revealed), cell = mean of a metric
(success rate by default, or mean recovery time).

CSV expected columns: samples, output_bits, trial, success, time_s
 - samples: int (e.g. 4,6,8...)
 - output_bits: int (e.g. 32,16,8...)
 - trial: int (trial id)
 - success: 0 or 1
 - time_s: float seconds spent in recover_state

Usage:
    python -m xorshift_project.experiments.plot_heatmap --csv results/experiments_XXXX.csv --out heatmap.png
"""

import argparse
import os

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

REQUIRED_COLUMNS = {'samples', 'output_bits', 'trial', 'success'}

METRIC_LABELS = {
    'success': 'Mean success rate (0–1)',
    'time_s': 'Mean recovery time (s)',
}


def prepare_pivot(df, metric='success'):
    agg = df.groupby(['output_bits', 'samples'], as_index=False)[metric].mean()
    # rows = output_bits (desc, widest outputs on top), cols = samples (asc)
    pivot = agg.pivot(index='output_bits', columns='samples', values=metric)
    pivot = pivot.sort_index(ascending=False)
    pivot = pivot.reindex(sorted(pivot.columns), axis=1)
    return pivot


def plot_heatmap(pivot, metric='success', title='State Recovery Heatmap', out_file=None, annotate=True, show=True):
    rows = pivot.index.tolist()
    cols = pivot.columns.tolist()
    data = pivot.values  # NaN for combos that were not run

    fig, ax = plt.subplots(figsize=(0.8 * len(cols) + 3, 0.6 * len(rows) + 2))
    if metric == 'success':
        im = ax.imshow(data, aspect='auto', interpolation='nearest', vmin=0.0, vmax=1.0)
        threshold = 0.5
    else:
        im = ax.imshow(data, aspect='auto', interpolation='nearest')
        threshold = np.nanmean(data) if np.isfinite(data).any() else 0.0

    ax.set_xticks(np.arange(len(cols)))
    ax.set_yticks(np.arange(len(rows)))
    ax.set_xticklabels(cols)
    ax.set_yticklabels(rows)
    ax.set_xlabel('Number of Samples (observed outputs)')
    ax.set_ylabel('Output bits revealed per 32-bit output')
    ax.set_title(title)
    plt.setp(ax.get_xticklabels(), rotation=45, ha='right')

    if annotate:
        for i in range(len(rows)):
            for j in range(len(cols)):
                val = data[i, j]
                if np.isnan(val):
                    ax.text(j, i, 'N/A', ha='center', va='center', color='gray', fontsize=9)
                else:
                    color = 'white' if val > threshold else 'black'
                    ax.text(j, i, f"{val:.2f}", ha='center', va='center', color=color, fontsize=9)

    cbar = fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    cbar.set_label(METRIC_LABELS.get(metric, metric))

    plt.tight_layout()
    if out_file:
        os.makedirs(os.path.dirname(out_file) or '.', exist_ok=True)
        plt.savefig(out_file, dpi=300)
        print(f"Heatmap saved to {out_file}")
    if show:
        plt.show()
    return fig


def load_results(path, metric='success'):
    df = pd.read_csv(path)
    required = REQUIRED_COLUMNS | {metric}
    if not required.issubset(set(df.columns)):
        raise SystemExit(f"CSV must contain columns: {sorted(required)}. Found: {df.columns.tolist()}")
    df['samples'] = df['samples'].astype(int)
    df['output_bits'] = df['output_bits'].astype(int)
    df[metric] = df[metric].astype(float)
    return df


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument('--csv', required=True, help='Path to experiments CSV')
    parser.add_argument('--out', default='results/heatmap_success_rate.png', help='Output PNG path')
    parser.add_argument('--metric', choices=sorted(METRIC_LABELS), default='success', help='Column to average')
    parser.add_argument('--title', default='State Recovery Heatmap', help='Plot title')
    parser.add_argument('--no_show', action='store_true', help='only write the PNG')
    args = parser.parse_args()

    df = load_results(args.csv, args.metric)
    pivot = prepare_pivot(df, args.metric)
    plot_heatmap(pivot, metric=args.metric, title=args.title, out_file=args.out, show=not args.no_show)


if __name__ == '__main__':
    main()
