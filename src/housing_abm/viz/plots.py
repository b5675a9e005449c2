"""시뮬레이션 결과 시각화"""

from pathlib import Path
from typing import Optional

import numpy as np
import matplotlib.pyplot as plt


def _finish(fig, save_path: Optional[str | Path] = None):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
    else:
        plt.show()


def plot_price_index(recorder, region_names: list[str], save_path: Optional[str | Path] = None):
    """지역별 주택가격지수 추이"""
    hpi = recorder.get_hpi_series()
    if len(hpi) == 0:
        return None

    fig, ax = plt.subplots(figsize=(12, 6))
    months = [s.month for s in recorder.history]
    for i, name in enumerate(region_names):
        if i < hpi.shape[1]:
            ax.plot(months, hpi[:, i], label=name, linewidth=1.5)

    ax.set_xlabel("Month")
    ax.set_ylabel("HPI")
    ax.set_title("House price index by region")
    ax.legend(loc='upper left', fontsize=8)
    ax.grid(True, alpha=0.3)
    _finish(fig, save_path)
    return fig


def plot_transactions(recorder, save_path: Optional[str | Path] = None):
    """월간 매매/임대 거래량"""
    if not recorder.history:
        return None
    sales, rentals = recorder.get_volume_series()
    months = np.array([s.month for s in recorder.history])

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.bar(months - 0.2, sales, width=0.4, label="Sales", color='#45b7d1')
    ax.bar(months + 0.2, rentals, width=0.4, label="Rentals", color='#ff6b6b')
    ax.set_xlabel("Month")
    ax.set_ylabel("Transactions")
    ax.set_title("Monthly transaction volume")
    ax.legend()
    ax.grid(True, alpha=0.3)
    _finish(fig, save_path)
    return fig


def plot_tenure_distribution(recorder, save_path: Optional[str | Path] = None):
    """점유 형태 분포 추이"""
    history = recorder.history
    if not history:
        return None
    months = [s.month for s in history]

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.stackplot(months,
                 [s.social_housing_rate for s in history],
                 [s.renting_rate for s in history],
                 [s.owner_occupier_rate for s in history],
                 [s.investor_rate for s in history],
                 labels=['Social housing', 'Renting', 'Owner-occupier', 'Investor'],
                 colors=['#ff6b6b', '#f7b267', '#4ecdc4', '#45b7d1'],
                 alpha=0.7)
    ax.set_xlabel("Month")
    ax.set_ylabel("Share of households")
    ax.set_title("Tenure distribution")
    ax.legend(loc='upper right')
    ax.set_ylim(0, 1)
    ax.grid(True, alpha=0.3)
    _finish(fig, save_path)
    return fig


def save_all(recorder, region_names: list[str], out_dir: str | Path) -> list[Path]:
    """모든 그래프 PNG 저장"""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    paths = [out_dir / "price_index.png", out_dir / "transactions.png", out_dir / "tenure.png"]
    plot_price_index(recorder, region_names, paths[0])
    plot_transactions(recorder, paths[1])
    plot_tenure_distribution(recorder, paths[2])
    return paths
