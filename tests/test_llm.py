"""
Tests for the AI coach: prompt building, plan parsing, the Gemini client and
the store-level plan/evaluation flows.

No test talks to the network; requests.post is replaced with a fake.
"""

from datetime import date

import pytest
import requests

from lift_tracker.core.models import (
    BodyweightSet,
    CardioSet,
    ExerciseEntry,
    ExerciseMaster,
    TargetMuscle,
    WeightedSet,
    WorkoutLog,
)
from lift_tracker.io.config_loader import LLMSettings, Settings
from lift_tracker.io.log_store import LogStore
from lift_tracker.llm import client as client_module
from lift_tracker.llm.client import GeminiClient, LLMError
from lift_tracker.llm.coach import (
    generate_evaluation,
    generate_plan,
    make_client,
    prepare_plan_prompt,
    previous_logs_for,
)
from lift_tracker.llm.prompts import (
    build_evaluation_prompt,
    build_plan_prompt,
    format_exercise_masters,
    format_generated_plan,
    format_workout_logs,
    parse_generated_plan,
)

PLAN_JSON = """{
  "exercises": [
    {"name": "ベンチプレス", "sets": [{"weight": 60, "reps": 10}, {"weight": 60, "reps": 8}]},
    {"name": "懸垂", "sets": [{"weight": 0, "reps": 10}]}
  ],
  "advice": "フォームを意識しましょう"
}"""

MASTERS = [
    ExerciseMaster(name="ベンチプレス", target_muscles=[TargetMuscle(muscle="chest")], id=1),
    ExerciseMaster(name="懸垂", is_bodyweight=True, target_muscles=[TargetMuscle(muscle="back")], id=2),
    ExerciseMaster(name="ランニング", is_cardio=True, id=3),
]


def _bench_log(date_str: str, weight: float = 60, memo: str | None = None, log_id: int | None = None) -> WorkoutLog:
    return WorkoutLog(
        date=date_str,
        exercises=[ExerciseEntry(
            name="ベンチプレス",
            sets=[WeightedSet(weight_kg=weight, reps=10), WeightedSet(weight_kg=weight, reps=8)],
        )],
        memo=memo,
        id=log_id,
    )


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class TestPromptFormatting:
    def test_workout_log_blocks(self):
        log = WorkoutLog(
            date="2024-03-04",
            exercises=[
                ExerciseEntry(name="ベンチプレス", sets=[WeightedSet(weight_kg=62.5, reps=10)]),
                ExerciseEntry(name="懸垂", sets=[BodyweightSet(reps=8)]),
                ExerciseEntry(name="ランニング", sets=[CardioSet(duration_min=30, distance_km=5)]),
            ],
        )
        assert format_workout_logs([log]) == (
            "【2024-03-04】\n"
            "  - ベンチプレス: 62.5kg×10回\n"
            "  - 懸垂: 8回\n"
            "  - ランニング: 30分/5km"
        )

    def test_no_history(self):
        assert format_workout_logs([]) == "トレーニング履歴はまだありません。"

    def test_master_suffixes(self):
        assert format_exercise_masters(MASTERS) == "- ベンチプレス\n- 懸垂（自重）\n- ランニング（有酸素）"

    def test_plan_prompt_sections_in_order(self):
        prompt = build_plan_prompt(
            profile="30代男性",
            masters=MASTERS,
            recent_logs=[_bench_log("2024-03-04")],
            user_memo="肩が少し痛い",
            stagnation_section="## 停滞中の種目",
            deload_section=None,
            volume_section="週間ボリューム状況",
        )
        order = [
            "■ ユーザープロフィール",
            "■ 利用可能な器具",
            "■ 最近のトレーニング履歴（直近1回分）",
            "■ トレーニング分析",
            "■ 今日の状態・リクエスト\n肩が少し痛い",
        ]
        positions = [prompt.index(s) for s in order]
        assert positions == sorted(positions)
        assert prompt.index("週間ボリューム状況") < prompt.index("## 停滞中の種目")

    def test_plan_prompt_omits_empty_sections(self):
        prompt = build_plan_prompt(None, MASTERS, [], stagnation_section="")
        assert "■ ユーザープロフィール" not in prompt
        assert "■ トレーニング分析" not in prompt
        assert "■ 今日の状態" not in prompt

    def test_evaluation_prompt(self):
        log = _bench_log("2024-03-08", memo="調子が良い")
        prompt = build_evaluation_prompt(None, log, [])
        assert "■ 今日のトレーニング（2024-03-08）\n- ベンチプレス: 60kg×10回, 60kg×8回" in prompt
        assert "まだ過去の記録がありません" in prompt
        assert "■ ユーザーのメモ\n調子が良い" in prompt
        assert prompt.endswith("絵文字を適度に使用してフレンドリーに")


class TestParsePlan:
    def test_fenced_block(self):
        plan = parse_generated_plan(f"はい、こちらです。\n```json\n{PLAN_JSON}\n```\n頑張って！")
        assert [e.name for e in plan.exercises] == ["ベンチプレス", "懸垂"]
        assert plan.exercises[0].sets[1].reps == 8
        assert plan.advice == "フォームを意識しましょう"

    def test_bare_object_with_chatter(self):
        plan = parse_generated_plan(f"プランです: {PLAN_JSON} 以上")
        assert len(plan.exercises) == 2

    def test_non_numeric_values_become_zero(self):
        plan = parse_generated_plan(
            '{"exercises": [{"name": "懸垂", "sets": [{"weight": "自重", "reps": null}]}]}'
        )
        assert plan.exercises[0].sets[0].weight == 0
        assert plan.exercises[0].sets[0].reps == 0
        assert plan.advice is None

    @pytest.mark.parametrize("text", ["申し訳ありません", '{"plan": []}', "```json\n{broken\n```"])
    def test_unusable_response(self, text):
        with pytest.raises(LLMError):
            parse_generated_plan(text)

    def test_format_plan(self):
        text = format_generated_plan(parse_generated_plan(PLAN_JSON))
        assert text.splitlines()[:2] == ["- ベンチプレス: 60kg×10回, 60kg×8回", "- 懸垂: 10回"]
        assert text.endswith("フォームを意識しましょう")


# ---------------------------------------------------------------------------
# Gemini client
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, status_code: int, payload=None):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload if payload is not None else {}

    def json(self):
        return self._payload


def _text_payload(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def fake_post(monkeypatch):
    """Queue responses (or exceptions) for requests.post and record calls."""
    queue: list = []
    calls: list[dict] = []

    def post(url, **kwargs):
        calls.append({"url": url, **kwargs})
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(client_module.requests, "post", post)
    return queue, calls


def _client(**kwargs) -> GeminiClient:
    c = GeminiClient(api_key="test-key", **kwargs)
    c.sleeps = []
    c._sleep = c.sleeps.append
    return c


class TestGeminiClient:
    def test_requires_api_key(self):
        with pytest.raises(LLMError, match="API key"):
            GeminiClient(api_key=None)

    def test_generate_request_and_text(self, fake_post):
        queue, calls = fake_post
        queue.append(FakeResponse(200, _text_payload("こんにちは")))

        assert _client().generate("prompt", max_tokens=512, temperature=0.3) == "こんにちは"

        call = calls[0]
        assert call["url"].endswith("/gemini-2.0-flash:generateContent")
        assert call["params"] == {"key": "test-key"}
        assert call["json"]["contents"][0]["parts"][0]["text"] == "prompt"
        assert call["json"]["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 512}

    def test_retries_server_errors_with_backoff(self, fake_post):
        queue, calls = fake_post
        queue.extend([FakeResponse(503), FakeResponse(429), FakeResponse(200, _text_payload("ok"))])
        messages: list[str] = []

        c = _client(on_retry=messages.append)
        assert c.generate("p") == "ok"
        assert c.sleeps == [2, 4]
        assert len(messages) == 2
        assert "503" in messages[0]

    def test_gives_up_after_max_retries(self, fake_post):
        queue, _ = fake_post
        queue.extend([FakeResponse(500)] * 3)
        with pytest.raises(LLMError, match="500"):
            _client().generate("p")

    def test_timeouts_retried_then_fail(self, fake_post):
        queue, _ = fake_post
        queue.extend([requests.exceptions.Timeout()] * 2)
        c = _client(max_retries=2)
        with pytest.raises(LLMError, match="timed out"):
            c.generate("p")
        assert c.sleeps == [2]

    def test_client_error_not_retried(self, fake_post):
        queue, calls = fake_post
        queue.append(FakeResponse(400, {"error": {"message": "API key not valid"}}))
        with pytest.raises(LLMError, match="API key not valid"):
            _client().generate("p")
        assert len(calls) == 1

    def test_connection_error(self, fake_post):
        queue, _ = fake_post
        queue.append(requests.exceptions.ConnectionError("refused"))
        with pytest.raises(LLMError, match="request failed"):
            _client().generate("p")

    def test_empty_response(self, fake_post):
        queue, _ = fake_post
        queue.append(FakeResponse(200, {"candidates": []}))
        with pytest.raises(LLMError, match="empty"):
            _client().generate("p")


# ---------------------------------------------------------------------------
# Coach flows
# ---------------------------------------------------------------------------

class FakeClient:
    def __init__(self, text: str):
        self.text = text
        self.prompts: list[str] = []

    def generate(self, prompt: str, max_tokens: int = 2048, temperature: float = 0.7) -> str:
        self.prompts.append(prompt)
        return self.text


@pytest.fixture
def store(tmp_path):
    s = LogStore(tmp_path)
    s.init(seed_presets=False)
    for m in MASTERS:
        s.add_master(ExerciseMaster(
            name=m.name, is_bodyweight=m.is_bodyweight, is_cardio=m.is_cardio,
            target_muscles=list(m.target_muscles),
        ))
    return s


def _settings(history_logs: int = 7) -> Settings:
    return Settings(llm=LLMSettings(api_key="k", history_logs=history_logs), user_profile="30代男性")


class TestCoach:
    def test_make_client_without_key(self):
        with pytest.raises(LLMError):
            make_client(Settings())

    def test_plan_prompt_uses_recent_logs_newest_first(self):
        logs = [_bench_log(d) for d in ("2024-03-01", "2024-03-04", "2024-03-06")]
        prompt = prepare_plan_prompt(logs, MASTERS, _settings(history_logs=2), today=date(2024, 3, 6))

        assert "直近2回分" in prompt
        assert "【2024-03-01】" not in prompt
        assert prompt.index("【2024-03-06】") < prompt.index("【2024-03-04】")
        # Chest got 4 sets this week: below the recommended band
        assert "不足: 胸(4.0セット)" in prompt

    def test_plan_prompt_includes_deload(self):
        logs = [_bench_log(d) for d in ("2024-02-26", "2024-03-04", "2024-03-11", "2024-03-18")]
        prompt = prepare_plan_prompt(logs, MASTERS, _settings(), today=date(2024, 3, 20))
        assert "## ディロード推奨" in prompt

    def test_plan_needs_masters(self):
        with pytest.raises(LLMError, match="No exercises"):
            prepare_plan_prompt([], [], _settings())

    def test_generate_plan(self, store):
        store.add_log(_bench_log("2024-03-04"))
        fake = FakeClient(f"```json\n{PLAN_JSON}\n```")

        plan = generate_plan(store, _settings(), "今日は軽めで", client=fake, today=date(2024, 3, 6))

        assert plan.exercises[0].name == "ベンチプレス"
        assert "今日は軽めで" in fake.prompts[0]
        assert "30代男性" in fake.prompts[0]

    def test_previous_logs_exclude_same_and_later_days(self):
        logs = [
            _bench_log("2024-03-01", log_id=1),
            _bench_log("2024-03-04", log_id=2),
            _bench_log("2024-03-04", log_id=3),
            _bench_log("2024-03-08", log_id=4),
        ]
        previous = previous_logs_for(logs, logs[2], limit=7)
        assert [l.id for l in previous] == [1]

    def test_evaluation_saved_on_log(self, store):
        store.add_log(_bench_log("2024-03-01", weight=57.5))
        target = store.add_log(_bench_log("2024-03-04", memo="調子が良い"))
        fake = FakeClient("素晴らしい！前回より2.5kg増えています💪")

        text = generate_evaluation(store, _settings(), target.id, client=fake)

        assert text.startswith("素晴らしい")
        assert "57.5kg×10回" in fake.prompts[0]
        saved = store.get_log(target.id)
        assert saved.evaluation == text
        assert saved.evaluation_generated_at is not None

    def test_evaluation_missing_log(self, store):
        with pytest.raises(KeyError):
            generate_evaluation(store, _settings(), 42, client=FakeClient("x"))
