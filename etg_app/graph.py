"""
ETG-over-time graph. Produces image file or returns data for web frontends.
"""

from pathlib import Path
from typing import List, Tuple

from etg_app import calculations
from etg_app.calculations import EtgEstimate


def curve_end_hours(estimate: EtgEstimate) -> float:
    """Hours after the last drink covered by the curve."""
    return max(
        estimate.total_elimination_hours,
        estimate.hours_since_last_drink + estimate.hours_until_safe,
    )


def curve_data(estimate: EtgEstimate, step_hours: float = 0.5) -> List[Tuple[float, float]]:
    """(hours_since_last_drink, etg) for use in any frontend."""
    return calculations.etg_curve(
        estimate.peak_etg,
        estimate.elimination_rate,
        start_hours=0.0,
        end_hours=curve_end_hours(estimate),
        step_hours=step_hours,
    )


def timeline_segments(estimate: EtgEstimate) -> dict:
    """Bar segments for a 'time passed / time until safe' timeline.

    Percentages are of ``total_hours``; segments with no width are omitted.
    """
    total = max(estimate.total_elimination_hours, estimate.hours_until_safe + 24.0)
    since = estimate.hours_since_last_drink
    rows = [
        ("Passed", since, "passed"),
        (
            "Time Until Safe",
            estimate.hours_until_safe,
            "above" if estimate.current_etg > estimate.threshold else "below",
        ),
    ]

    segments = []
    for label, hours, state in rows:
        percent = hours / total * 100.0
        if percent <= 0:
            continue
        segments.append({
            "label": label,
            "hours": round(max(0.0, hours), 2),
            "percent": round(percent, 2),
            "state": state,
        })

    return {
        "total_hours": round(total, 2),
        "marker_percent": round(min(100.0, max(0.0, since / total * 100.0)), 2),
        "segments": segments,
    }


def save_etg_graph(
    estimate: EtgEstimate,
    output_path: str = "etg_graph.png",
    step_hours: float = 0.5,
    title: str = "Estimated ETG over time",
) -> str:
    """
    Plot ETG curve with matplotlib and save to file.
    Returns path to saved file. Requires: pip install matplotlib
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib is required for save_etg_graph. pip install matplotlib")

    points = curve_data(estimate, step_hours=step_hours)
    times, levels = zip(*points)

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(times, levels, color="#2563eb", linewidth=2, label="ETG")
    ax.fill_between(times, levels, alpha=0.2, color="#2563eb")
    ax.axhline(
        y=estimate.threshold,
        color="#dc2626",
        linestyle="--",
        linewidth=1,
        label=f"Test threshold ({estimate.threshold:g} ng/mL)",
    )
    if estimate.hours_since_last_drink >= 0:
        ax.axvline(x=estimate.hours_since_last_drink, color="#1f2937", linewidth=1, label="Now")
    ax.set_xlabel("Hours since last drink")
    ax.set_ylabel("ETG (ng/mL)")
    ax.set_title(title)
    ax.legend(loc="upper right")
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
