"""
Prompt construction and response parsing for the AI coach.

Prompts are written in Japanese to match the exercise names and the coaching
output the user reads.
"""

import json
import math
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from ..core.metrics import format_number
from ..core.models import ExerciseMaster, SetEntry, WorkoutLog
from .client import LLMError

PLAN_SYSTEM_PROMPT = """あなたは経験豊富なパーソナルトレーナーです。
ユーザーの情報と過去のトレーニング履歴を考慮し、今日のトレーニングプランを提案してください。

【重要な指示】
1. 提案する種目は「利用可能な器具」リストに存在するもののみを使用してください
2. 過去の履歴から適切な重量・回数を推測してください
3. 回答は必ず以下のJSON形式で返してください（JSON以外のテキストは含めないでください）

{
  "exercises": [
    {
      "name": "種目名",
      "sets": [
        { "weight": 重量kg（自重の場合は0）, "reps": 回数 }
      ]
    }
  ],
  "advice": "今日のトレーニングに関するアドバイス（任意）"
}"""

EVALUATION_INSTRUCTIONS = """あなたは経験豊富なパーソナルトレーナーです。
ユーザーの今日のトレーニングを評価し、フィードバックを提供してください。

【評価のポイント】
1. トレーニングボリューム（種目数、セット数）は適切か
2. 前回と比較して進歩はあるか（重量増加、回数増加など）
3. 種目のバランスは良いか
4. 次回への具体的なアドバイス"""

EVALUATION_OUTPUT_FORMAT = """【出力形式】
・簡潔で具体的なフィードバック（200-300文字程度）
・ポジティブな点と改善点をバランスよく
・絵文字を適度に使用してフレンドリーに"""


@dataclass
class GeneratedSet:
    weight: float
    reps: int


@dataclass
class GeneratedExercise:
    name: str
    sets: list[GeneratedSet] = field(default_factory=list)


@dataclass
class GeneratedPlan:
    exercises: list[GeneratedExercise]
    advice: str | None = None


# =============================================================================
# FORMATTING
# =============================================================================


def format_prompt_set(s: SetEntry) -> str:
    """``60kg×10回`` for loaded sets, ``10回`` for reps only, ``30分/5km`` for cardio."""
    if s.kind == "cardio":
        text = f"{format_number(s.duration_min)}分"
        if s.distance_km is not None:
            text += f"/{format_number(s.distance_km)}km"
        return text
    if s.weight_kg > 0:
        return f"{format_number(s.weight_kg)}kg×{s.reps}回"
    return f"{s.reps}回"


def _format_exercises(log: WorkoutLog, indent: str) -> str:
    return "\n".join(
        f"{indent}- {ex.name}: {', '.join(format_prompt_set(s) for s in ex.sets)}"
        for ex in log.exercises
    )


def format_workout_logs(logs: Sequence[WorkoutLog]) -> str:
    """Render logs as dated blocks, in the order given."""
    if not logs:
        return "トレーニング履歴はまだありません。"
    return "\n\n".join(f"【{log.date}】\n{_format_exercises(log, '  ')}" for log in logs)


def format_exercise_masters(masters: Sequence[ExerciseMaster]) -> str:
    """One line per available exercise, marking bodyweight and cardio ones."""
    lines = []
    for m in masters:
        suffix = "（自重）" if m.is_bodyweight else "（有酸素）" if m.is_cardio else ""
        lines.append(f"- {m.name}{suffix}")
    return "\n".join(lines)


# =============================================================================
# PROMPTS
# =============================================================================


def build_plan_prompt(
    profile: str | None,
    masters: Sequence[ExerciseMaster],
    recent_logs: Sequence[WorkoutLog],
    user_memo: str = "",
    stagnation_section: str | None = None,
    deload_section: str | None = None,
    volume_section: str | None = None,
) -> str:
    """
    Build the prompt asking for today's training plan as JSON.

    Args:
        profile: Free-form trainee description, or None
        masters: Exercises the plan may use
        recent_logs: Recent logs, newest first
        user_memo: Today's condition or requests
        stagnation_section: From format_stagnation_for_prompt, or None/""
        deload_section: From format_deload_for_prompt, or None
        volume_section: From format_volume_for_prompt, or None
    """
    parts = [PLAN_SYSTEM_PROMPT]

    if profile:
        parts.append(f"■ ユーザープロフィール\n{profile}")

    parts.append(f"■ 利用可能な器具\n{format_exercise_masters(masters)}")
    parts.append(
        f"■ 最近のトレーニング履歴（直近{len(recent_logs)}回分）\n"
        f"{format_workout_logs(recent_logs)}"
    )

    analysis = [s for s in (volume_section, stagnation_section, deload_section) if s]
    if analysis:
        parts.append("■ トレーニング分析\n" + "\n\n".join(analysis))

    if user_memo.strip():
        parts.append(f"■ 今日の状態・リクエスト\n{user_memo.strip()}")

    return "\n\n".join(parts)


def build_evaluation_prompt(
    profile: str | None,
    log: WorkoutLog,
    previous_logs: Sequence[WorkoutLog],
) -> str:
    """Build the prompt asking for feedback on one training day."""
    parts = [EVALUATION_INSTRUCTIONS]

    if profile:
        parts.append(f"■ ユーザープロフィール\n{profile}")

    parts.append(f"■ 今日のトレーニング（{log.date}）\n{_format_exercises(log, '')}")

    history = format_workout_logs(previous_logs) if previous_logs else "まだ過去の記録がありません"
    parts.append(f"■ 過去のトレーニング履歴\n{history}")

    if log.memo:
        parts.append(f"■ ユーザーのメモ\n{log.memo}")

    parts.append(EVALUATION_OUTPUT_FORMAT)
    return "\n\n".join(parts)


# =============================================================================
# RESPONSE PARSING
# =============================================================================

_FENCED_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def _to_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_generated_plan(text: str) -> GeneratedPlan:
    """
    Extract the JSON plan from a model response.

    Accepts a fenced ```json block, or else the outermost {...}.  Missing or
    non-numeric weights and reps become 0.

    Raises:
        LLMError: If no JSON object with an ``exercises`` list is found
    """
    m = _FENCED_RE.search(text)
    if m:
        json_str = m.group(1).strip()
    else:
        m = _OBJECT_RE.search(text)
        json_str = m.group(0) if m else text

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise LLMError(f"Failed to parse plan JSON: {e}") from e

    if not isinstance(parsed, dict) or not isinstance(parsed.get("exercises"), list):
        raise LLMError("Failed to parse plan JSON: 'exercises' list not found")

    exercises = []
    for ex in parsed["exercises"]:
        if not isinstance(ex, dict):
            continue
        sets = [
            GeneratedSet(weight=_to_number(s.get("weight")), reps=int(_to_number(s.get("reps"))))
            for s in ex.get("sets") or []
            if isinstance(s, dict)
        ]
        exercises.append(GeneratedExercise(name=str(ex.get("name") or ""), sets=sets))

    advice = parsed.get("advice")
    return GeneratedPlan(exercises=exercises, advice=str(advice) if advice else None)


def format_generated_plan(plan: GeneratedPlan) -> str:
    """Plain-text rendering of a plan for the terminal."""
    lines = []
    for ex in plan.exercises:
        sets = ", ".join(
            f"{format_number(s.weight)}kg×{s.reps}回" if s.weight > 0 else f"{s.reps}回"
            for s in ex.sets
        )
        lines.append(f"- {ex.name}: {sets}")
    if plan.advice:
        lines.append("")
        lines.append(plan.advice)
    return "\n".join(lines)
