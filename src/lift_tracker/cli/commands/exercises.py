"""Exercise commands: init, exercises, add-exercise, delete-exercise."""

import json
from typing import Annotated, Optional

import typer

from ...core.config import ALL_MUSCLE_GROUPS
from ...core.models import ExerciseMaster, TargetMuscle
from ...io.serializers import ValidationError, exercise_master_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store, open_store


def _parse_muscles(value: str | None) -> list[str]:
    """Split a comma-separated muscle list, rejecting unknown names."""
    if not value:
        return []
    muscles = [m.strip().lower() for m in value.split(",") if m.strip()]
    unknown = [m for m in muscles if m not in ALL_MUSCLE_GROUPS]
    if unknown:
        raise typer.BadParameter(
            f"Unknown muscle group(s): {', '.join(unknown)}. "
            f"Choose from: {', '.join(ALL_MUSCLE_GROUPS)}"
        )
    return muscles


@app.command()
def init(
    data_dir: DataDirOption = None,
    no_presets: Annotated[
        bool,
        typer.Option("--no-presets", help="Start with an empty exercise list"),
    ] = False,
) -> None:
    """
    Create the data directory and seed the preset exercise list.
    """
    store = get_store(data_dir)
    already = store.exists()

    try:
        seeded = store.init(seed_presets=not no_presets)
    except (OSError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if already:
        views.print_info(f"Data directory already initialized: {store.data_dir}")
    else:
        views.print_success(f"Initialized {store.data_dir}")
    if seeded:
        views.print_info(f"Registered {seeded} preset exercises.")


@app.command()
def exercises(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List registered exercises.
    """
    store = open_store(data_dir)
    try:
        masters = store.load_masters()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([exercise_master_to_dict(m) for m in masters], ensure_ascii=False, indent=2))
        return

    views.print_exercises(masters)


@app.command("add-exercise")
def add_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name (matched exactly when logging)")],
    data_dir: DataDirOption = None,
    bodyweight: Annotated[
        bool,
        typer.Option("--bodyweight", "-b", help="Reps-only exercise"),
    ] = False,
    cardio: Annotated[
        bool,
        typer.Option("--cardio", "-c", help="Duration/distance exercise"),
    ] = False,
    main: Annotated[
        Optional[str],
        typer.Option("--main", help="Primary muscles, comma-separated (e.g. chest,triceps)"),
    ] = None,
    sub: Annotated[
        Optional[str],
        typer.Option("--sub", help="Secondary muscles, comma-separated"),
    ] = None,
) -> None:
    """
    Register a new exercise.
    """
    store = open_store(data_dir)

    targets = [TargetMuscle(muscle=m, is_main=True) for m in _parse_muscles(main)]  # type: ignore[arg-type]
    targets += [TargetMuscle(muscle=m, is_main=False) for m in _parse_muscles(sub)]  # type: ignore[arg-type]

    try:
        master = ExerciseMaster(
            name=name.strip(),
            is_bodyweight=bodyweight,
            is_cardio=cardio,
            target_muscles=targets,
        )
        stored = store.add_master(master)
    except (ValueError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Added exercise #{stored.id}: {stored.name} ({stored.kind})")


@app.command("delete-exercise")
def delete_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name")],
    data_dir: DataDirOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """
    Remove an exercise from the list.  Logged workouts are kept.
    """
    store = open_store(data_dir)

    if not yes and not views.confirm_action(f"Delete exercise '{name}'?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete_master(name)
    except KeyError:
        views.print_error(f"Exercise not found: {name}")
        raise typer.Exit(1)

    views.print_success(f"Deleted exercise: {name}")
