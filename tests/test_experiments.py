"""
Experiment harness tests: in-process recovery runs and heatmap preparation.
"""

import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

from xorshift_project.experiments.plot_heatmap import load_results, plot_heatmap, prepare_pivot
from xorshift_project.experiments.run_experiments import run_single, truncate


class TestRunSingle:
    """run_single reports whether the true state came back."""

    def test_full_outputs_succeed(self):
        success, elapsed = run_single(4, 32, seed=1)
        assert success is True
        assert elapsed >= 0

    def test_too_few_samples_fail(self):
        success, _ = run_single(1, 32, seed=1)
        assert success is False

    def test_truncate(self):
        assert truncate(0xDBFFF5AA, 32) == 0xDBFFF5AA
        assert truncate(0xDBFFF5AA, 8, 'high') == 0xDB
        assert truncate(0xDBFFF5AA, 8, 'low') == 0xAA


@pytest.fixture
def results_df():
    return pd.DataFrame({
        'samples':     [4, 4, 8, 8, 4, 4],
        'output_bits': [32, 32, 32, 32, 8, 8],
        'trial':       [0, 1, 0, 1, 0, 1],
        'success':     [1, 1, 1, 1, 0, 1],
        'time_s':      [0.1, 0.3, 0.2, 0.2, 0.5, 0.7],
    })


class TestPreparePivot:
    """Pivot layout: output_bits rows descending, samples columns ascending."""

    def test_success_rate(self, results_df):
        pivot = prepare_pivot(results_df)
        assert pivot.index.tolist() == [32, 8]
        assert pivot.columns.tolist() == [4, 8]
        assert pivot.loc[32, 4] == 1.0
        assert pivot.loc[8, 4] == 0.5
        assert np.isnan(pivot.loc[8, 8])

    def test_time_metric(self, results_df):
        pivot = prepare_pivot(results_df, 'time_s')
        assert pivot.loc[32, 4] == pytest.approx(0.2)
        assert pivot.loc[8, 4] == pytest.approx(0.6)


class TestPlotting:
    """CSV loading and PNG output."""

    def test_load_results_rejects_missing_columns(self, tmp_path):
        path = tmp_path / 'bad.csv'
        pd.DataFrame({'samples': [1]}).to_csv(path, index=False)
        with pytest.raises(SystemExit):
            load_results(path)

    def test_plot_writes_png(self, tmp_path, results_df):
        csv_path = tmp_path / 'results.csv'
        results_df.to_csv(csv_path, index=False)
        df = load_results(csv_path)
        out = tmp_path / 'plots' / 'heatmap.png'
        plot_heatmap(prepare_pivot(df), out_file=str(out), show=False)
        assert out.exists()
