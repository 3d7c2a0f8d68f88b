"""
AI coach: plan generation and workout evaluation.

Glues the store, the analytics sections, the prompts and the Gemini client
together.
"""

from datetime import date
from typing import Sequence

from ..core.dates import get_week_start_date
from ..core.models import ExerciseMaster, WorkoutLog
from ..core.periodization import format_deload_for_prompt, generate_deload_suggestion
from ..core.stagnation import detect_stagnation, format_stagnation_for_prompt
from ..core.volume import calculate_weekly_volume, format_volume_for_prompt
from ..io.config_loader import Settings
from ..io.log_store import LogStore
from .client import GeminiClient, LLMError
from .prompts import (
    GeneratedPlan,
    build_evaluation_prompt,
    build_plan_prompt,
    parse_generated_plan,
)


def make_client(settings: Settings, on_retry=None) -> GeminiClient:
    """Client configured from settings.  Raises LLMError without an API key."""
    return GeminiClient(
        api_key=settings.llm.api_key,
        model=settings.llm.model,
        timeout=settings.llm.timeout_seconds,
        max_retries=settings.llm.max_retries,
        on_retry=on_retry,
    )


def prepare_plan_prompt(
    logs: Sequence[WorkoutLog],
    masters: Sequence[ExerciseMaster],
    settings: Settings,
    user_memo: str = "",
    today: date | None = None,
) -> str:
    """
    Assemble the full plan prompt, analytics sections included.

    Raises:
        LLMError: If there are no exercises to plan with
    """
    if not masters:
        raise LLMError("No exercises registered. Add exercises before generating a plan.")

    today = today or date.today()
    recent = sorted(logs, key=lambda log: (log.date, log.id or 0), reverse=True)
    recent = recent[: settings.llm.history_logs]

    volume = calculate_weekly_volume(logs, masters, get_week_start_date(today))
    deload = generate_deload_suggestion(logs, masters, today)

    return build_plan_prompt(
        profile=settings.user_profile,
        masters=masters,
        recent_logs=recent,
        user_memo=user_memo,
        stagnation_section=format_stagnation_for_prompt(detect_stagnation(logs, masters)),
        deload_section=format_deload_for_prompt(deload) if deload else None,
        volume_section=format_volume_for_prompt(volume),
    )


def generate_plan(
    store: LogStore,
    settings: Settings,
    user_memo: str = "",
    client: GeminiClient | None = None,
    today: date | None = None,
) -> GeneratedPlan:
    """
    Ask the model for today's plan.

    Raises:
        LLMError: Missing API key, HTTP failure, or an unparseable plan
    """
    prompt = prepare_plan_prompt(
        store.load_logs(), store.load_masters(), settings, user_memo, today
    )
    client = client or make_client(settings)
    text = client.generate(
        prompt,
        max_tokens=settings.llm.plan_max_tokens,
        temperature=settings.llm.temperature,
    )
    return parse_generated_plan(text)


def previous_logs_for(
    logs: Sequence[WorkoutLog], log: WorkoutLog, limit: int
) -> list[WorkoutLog]:
    """Logs strictly before ``log``'s date, newest first, at most ``limit``."""
    earlier = [l for l in logs if l.id != log.id and l.date < log.date]
    earlier.sort(key=lambda l: (l.date, l.id or 0), reverse=True)
    return earlier[:limit]


def generate_evaluation(
    store: LogStore,
    settings: Settings,
    log_id: int,
    client: GeminiClient | None = None,
) -> str:
    """
    Ask the model to evaluate one training day and save the result on the log.

    Raises:
        KeyError: If the log does not exist
        LLMError: Missing API key, HTTP failure, or an empty response
    """
    logs = store.load_logs()
    log = next((l for l in logs if l.id == log_id), None)
    if log is None:
        raise KeyError(f"Workout log not found: {log_id}")

    prompt = build_evaluation_prompt(
        settings.user_profile, log, previous_logs_for(logs, log, settings.llm.history_logs)
    )
    client = client or make_client(settings)
    text = client.generate(
        prompt,
        max_tokens=settings.llm.evaluation_max_tokens,
        temperature=settings.llm.temperature,
    )
    store.set_evaluation(log_id, text)
    return text
