"""
services/chart_service.py
-------------------------
Chart images for the /chart command, rendered with matplotlib into PNG
buffers (Agg backend, no display needed).
"""

import io
from datetime import date, timedelta

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from repositories.transaction_repo import TransactionRepository
from utils.formatters import format_currency
from utils.logger import get_logger
from utils.statement_period import get_month_bounds

logger = get_logger(__name__)

plt.rcParams["font.family"] = "DejaVu Sans"
plt.rcParams["figure.facecolor"] = "#1a1a2e"
plt.rcParams["text.color"] = "#e0e0e0"
plt.rcParams["axes.facecolor"] = "#1a1a2e"

_PALETTE = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7", "#DDA0DD",
    "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9", "#F1948A", "#82E0AA",
]
_WEEKDAYS_PT = ["seg", "ter", "qua", "qui", "sex", "sáb", "dom"]


def _to_png(fig) -> io.BytesIO:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=150, bbox_inches="tight", facecolor=fig.get_facecolor())
    buf.seek(0)
    plt.close(fig)
    return buf


class ChartService:
    """Renders spending charts for one user."""

    def __init__(self, repo: TransactionRepository | None = None):
        self.repo = repo or TransactionRepository()

    def generate_monthly_pie(self, user_id: int, year: int | None = None,
                             month: int | None = None) -> io.BytesIO | None:
        """
        Donut chart of a month's expenses by category.

        Returns:
            PNG buffer, or None when the month has no expenses.
        """
        today = date.today()
        y, m = year or today.year, month or today.month
        start, end = get_month_bounds(y, m)

        categories = self.repo.get_category_summary(user_id, start, end)
        if not categories:
            return None

        labels = [c["category"] for c in categories]
        values = [c["total"] for c in categories]
        colors = [_PALETTE[i % len(_PALETTE)] for i in range(len(values))]

        fig, ax = plt.subplots(figsize=(8, 6))
        wedges, _, autotexts = ax.pie(
            values,
            autopct=lambda pct: f"{pct:.1f}%",
            colors=colors,
            startangle=90,
            pctdistance=0.82,
            wedgeprops=dict(width=0.5, edgecolor="#1a1a2e", linewidth=2),
        )
        for autotext in autotexts:
            autotext.set_color("white")
            autotext.set_fontsize(10)
            autotext.set_fontweight("bold")

        ax.legend(
            wedges,
            [f"{label}: {format_currency(value)}" for label, value in zip(labels, values)],
            loc="center left",
            bbox_to_anchor=(1, 0, 0.5, 1),
            fontsize=10,
            frameon=False,
        )
        ax.set_title(
            f"Gastos por categoria - {m:02d}/{y}\nTotal: {format_currency(sum(values))}",
            fontsize=14, fontweight="bold", pad=20,
        )
        plt.tight_layout()

        logger.info(f"Generated pie chart for user {user_id}, {m}/{y}")
        return _to_png(fig)

    def generate_weekly_bar(self, user_id: int, today: date | None = None) -> io.BytesIO | None:
        """Bar chart of daily expenses over the last 7 days, or None without data."""
        today = today or date.today()
        week_start = today - timedelta(days=6)

        expenses = self.repo.get_by_date_range(user_id, week_start, today, tx_type="expense")
        if not expenses:
            return None

        daily = {week_start + timedelta(days=d): 0.0 for d in range(7)}
        for tx in expenses:
            if tx.date in daily:
                daily[tx.date] += tx.amount

        days = list(daily)
        amounts = list(daily.values())

        fig, ax = plt.subplots(figsize=(9, 5))
        bars = ax.bar(range(len(days)), amounts, color="#FF6B6B", width=0.6, zorder=3)
        for bar, amount in zip(bars, amounts):
            if amount > 0:
                ax.text(
                    bar.get_x() + bar.get_width() / 2, bar.get_height(),
                    f"{amount:.0f}",
                    ha="center", va="bottom", color="#e0e0e0", fontsize=10, fontweight="bold",
                )

        ax.set_xticks(range(len(days)))
        ax.set_xticklabels([f"{_WEEKDAYS_PT[d.weekday()]}\n{d:%d/%m}" for d in days],
                           fontsize=9, color="#e0e0e0")
        ax.set_ylabel("Valor (R$)", fontsize=11, color="#e0e0e0")
        ax.set_title(
            f"Gastos diários - últimos 7 dias\nTotal: {format_currency(sum(amounts))}",
            fontsize=13, fontweight="bold", pad=15,
        )
        for side in ("top", "right"):
            ax.spines[side].set_visible(False)
        ax.tick_params(colors="#e0e0e0")
        ax.grid(axis="y", alpha=0.2, color="#888")
        ax.set_axisbelow(True)
        plt.tight_layout()

        logger.info(f"Generated weekly bar chart for user {user_id}")
        return _to_png(fig)
