"""AI coach commands: prompt, plan, evaluate."""

import json
from dataclasses import asdict
from typing import Annotated

import typer

from ...io.config_loader import load_settings
from ...io.serializers import ValidationError
from ...llm.client import LLMError
from ...llm.coach import generate_evaluation, generate_plan, make_client, prepare_plan_prompt
from ...llm.prompts import format_generated_plan
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    ReferenceDateOption,
    app,
    load_all,
    open_store,
    reference_date,
)

MemoOption = Annotated[
    str,
    typer.Option("--memo", "-m", help="Today's condition or requests, passed to the coach"),
]


@app.command()
def prompt(
    data_dir: DataDirOption = None,
    memo: MemoOption = "",
    date: ReferenceDateOption = None,
) -> None:
    """
    Print the plan prompt without calling the model.
    """
    store = open_store(data_dir)
    logs, masters = load_all(store)
    settings = load_settings(store.data_dir)

    try:
        text = prepare_plan_prompt(logs, masters, settings, memo, reference_date(date))
    except LLMError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    print(text)


@app.command()
def plan(
    data_dir: DataDirOption = None,
    memo: MemoOption = "",
    json_out: JsonOption = False,
) -> None:
    """
    Ask the AI coach for today's training plan.
    """
    store = open_store(data_dir)
    settings = load_settings(store.data_dir)

    try:
        client = make_client(settings, on_retry=views.print_warning)
        with views.console.status("Generating plan..."):
            generated = generate_plan(store, settings, memo, client=client)
    except (LLMError, FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(asdict(generated), ensure_ascii=False, indent=2))
        return

    views.console.print("[bold cyan]Today's plan[/bold cyan]")
    views.console.print(format_generated_plan(generated), markup=False)


@app.command()
def evaluate(
    log_id: Annotated[int, typer.Argument(help="Log ID (see 'history')")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Ask the AI coach to evaluate a workout.  The result is saved on the log.
    """
    store = open_store(data_dir)
    settings = load_settings(store.data_dir)

    try:
        client = make_client(settings, on_retry=views.print_warning)
        with views.console.status("Evaluating workout..."):
            text = generate_evaluation(store, settings, log_id, client=client)
    except KeyError:
        views.print_error(f"Workout log not found: {log_id}")
        raise typer.Exit(1)
    except (LLMError, FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.console.print(f"[bold magenta]AI evaluation (#{log_id})[/bold magenta]")
    views.console.print(text, markup=False)
