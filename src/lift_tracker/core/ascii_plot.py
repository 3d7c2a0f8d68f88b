"""
ASCII plotting for exercise progress.

Creates terminal-friendly charts for the ``chart`` and ``volume`` commands.
"""

from datetime import date

from .dates import parse_date
from .metrics import format_number
from .models import ExerciseChartSeries, ExerciseStats

# (stats attribute, label, unit)
CHART_METRICS: dict[str, tuple[str, str, str]] = {
    "1rm": ("estimated_1rm", "Estimated 1RM", "kg"),
    "weight": ("max_weight", "Max weight", "kg"),
    "volume": ("total_volume", "Total volume", "kg"),
    "reps": ("max_reps", "Max reps", "reps"),
    "total-reps": ("total_reps", "Total reps", "reps"),
    "duration": ("total_duration", "Duration", "min"),
    "distance": ("total_distance", "Distance", "km"),
}


def default_metric(series: ExerciseChartSeries) -> str:
    """Chart metric to show when none was asked for."""
    if series.is_cardio:
        return "duration"
    if series.is_bodyweight:
        return "reps"
    return "1rm"


def metric_value(stats: ExerciseStats, metric: str) -> float:
    attr, _, _ = CHART_METRICS[metric]
    return float(getattr(stats, attr))


def create_metric_plot(
    series: ExerciseChartSeries,
    metric: str | None = None,
    width: int = 60,
    height: int = 16,
) -> str:
    """
    Create an ASCII line plot of one exercise metric over time.

    Args:
        series: Chart series from build_exercise_chart_data
        metric: Key of CHART_METRICS (default depends on exercise kind)
        width: Plot width in characters
        height: Plot height in lines

    Returns:
        ASCII art string
    """
    metric = metric or default_metric(series)
    if metric not in CHART_METRICS:
        raise ValueError(f"Unknown metric: {metric}. Choose from: {', '.join(CHART_METRICS)}")
    _, label, unit = CHART_METRICS[metric]

    points: list[tuple[date, float]] = [
        (parse_date(p.date), metric_value(p.stats, metric)) for p in series.points
    ]
    if not points:
        return f"No data recorded for {series.name}."

    min_date = points[0][0]
    max_date = points[-1][0]
    date_range = (max_date - min_date).days or 1

    values = [v for _, v in points]
    y_min = max(0.0, min(values) * 0.9)
    y_max = max(values) * 1.1 if max(values) > 0 else 1.0
    y_range = (y_max - y_min) or 1.0

    plot_width = width - 8  # Leave room for y-axis labels
    plot_height = height - 3  # Leave room for x-axis and title

    grid = [[" " for _ in range(plot_width)] for _ in range(plot_height)]

    plot_points: list[tuple[int, int, float]] = []  # (x, y, value)
    for d, value in points:
        x = int(((d - min_date).days / date_range) * (plot_width - 1))
        y = int(((value - y_min) / y_range) * (plot_height - 1))
        plot_points.append((x, plot_height - 1 - y, value))

    def _p(x: int, r: int, ch: str) -> None:
        if 0 <= x < plot_width and 0 <= r < plot_height and grid[r][x] == " ":
            grid[r][x] = ch

    # Connecting lines, staircase style: ╭─╯
    for (col1, row1, _), (col2, row2, _) in zip(plot_points, plot_points[1:]):
        n_rows = abs(row2 - row1)
        if n_rows == 0:
            for x in range(col1 + 1, col2):
                _p(x, row1, "─")
            continue
        if col1 == col2:
            for r in range(min(row1, row2) + 1, max(row1, row2)):
                _p(col1, r, "│")
            continue

        row_dir = -1 if row2 < row1 else 1  # -1 = going up
        corner_exit = "╯" if row_dir == -1 else "╮"
        corner_entry = "╭" if row_dir == -1 else "╰"
        n_segs = n_rows + 1

        for step in range(n_segs):
            row = row1 + row_dir * step
            pivot_in = col1 + (col2 - col1) * step // n_segs
            pivot_out = col1 + (col2 - col1) * (step + 1) // n_segs
            if step > 0:
                _p(pivot_in, row, corner_entry)
            start = col1 + 1 if step == 0 else pivot_in + 1
            end = col2 if step == n_segs - 1 else pivot_out
            for x in range(start, end):
                _p(x, row, "─")
            if step < n_segs - 1:
                _p(pivot_out, row, corner_exit)

    for x, y, _ in plot_points:
        grid[y][x] = "●"

    lines = [f"{label} ({series.name})", "─" * width]

    for i, row in enumerate(grid):
        y_val = y_max - (i / (plot_height - 1)) * y_range if plot_height > 1 else y_max
        row_str = "".join(row)

        # Value labels next to data points, right side when they fit
        for x, py, value in plot_points:
            if py != i:
                continue
            text = f"({format_number(round(value, 1))})"
            pos = x + 2 if x + 2 + len(text) < plot_width else x - len(text) - 1
            if pos >= 0:
                row_str = row_str[:pos] + text + row_str[pos + len(text):]
                row_str = row_str[:plot_width]

        lines.append(f"{y_val:6.1f} ┤" + row_str)

    lines.append("─" * width)

    label_line = [" "] * plot_width
    mid_date = min_date + (max_date - min_date) / 2
    for x_pos, d in ((0, min_date), (plot_width // 2, mid_date), (plot_width - 10, max_date)):
        for j, c in enumerate(d.strftime("%b %d")):
            if 0 <= x_pos + j < plot_width:
                label_line[x_pos + j] = c
    lines.append("        " + "".join(label_line))
    lines.append(f"● {label.lower()} ({unit})")

    return "\n".join(lines)


def create_simple_bar_chart(
    labels: list[str],
    values: list[float],
    width: int = 40,
    title: str = "",
    markers: tuple[float, float] | None = None,
) -> str:
    """
    Create a simple horizontal bar chart.

    Args:
        labels: Labels for each bar
        values: Values for each bar
        width: Maximum bar width
        title: Chart title
        markers: Optional (low, high) band drawn as ┆ on each bar row

    Returns:
        ASCII bar chart string
    """
    if not values:
        return "No data to display."

    scale_max = max(max(values), markers[1] if markers else 0)
    max_label_len = max(len(l) for l in labels) if labels else 0

    lines = []

    if title:
        lines.append(title)
        lines.append("─" * (max_label_len * 2 + width + 8))

    for label, value in zip(labels, values):
        bar_len = int((value / scale_max) * width) if scale_max > 0 else 0
        cells = ["█"] * bar_len + [" "] * (width - bar_len)
        if markers and scale_max > 0:
            for m in markers:
                pos = min(int((m / scale_max) * width), width - 1)
                if cells[pos] == " ":
                    cells[pos] = "┆"
        # Labels are double-width CJK; pad with ideographic spaces
        padded = "　" * (max_label_len - len(label)) + label
        lines.append(f"{padded} │{''.join(cells).rstrip()} {value:.1f}")

    return "\n".join(lines)
