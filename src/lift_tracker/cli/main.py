"""
CLI entry point using Typer.

Provides commands for workout tracking and analysis:
- init / exercises / add-exercise / delete-exercise: exercise list
- log / history / show-log / delete-log / memo: workout logs
- progress / chart / volume / stagnation / deload: analytics
- export / import: Markdown transfer
- prompt / plan / evaluate: AI coach
"""

from .app import app
from .commands import analysis, coach, exercises, logs, transfer  # noqa: F401  (registers commands)

if __name__ == "__main__":
    app()
