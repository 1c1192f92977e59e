from __future__ import annotations

import asyncio
from pathlib import Path

from .assistant import build_assistant_from_settings
from .config import Settings, configure_logging, load_env_file
from .form_sync import GoogleFormMirror, ProgressRecorder
from .narrative import NarrativeBuilder, render_text
from .openai_analyst import build_analyst_from_settings
from .predictor import RiskPredictor
from .reference_data import create_sample_assessments
from .storage import JsonFileProgressStore
from .validation import validate_assessment

DEMO_USER_ID = "demo-user"
DEMO_CHAT_PROMPT = "How can I cut down on late-night scrolling?"


async def run(settings: Settings) -> None:
    predictor = RiskPredictor(build_analyst_from_settings(settings))
    mirror = GoogleFormMirror(settings.form_url) if settings.form_url else None
    recorder = ProgressRecorder(JsonFileProgressStore(settings.data_dir), mirror)
    builder = NarrativeBuilder()

    print("--- Assessments ---")
    for name, data in create_sample_assessments().items():
        validate_assessment(data)
        result = await predictor.predict(data)
        entry = await recorder.save_progress(DEMO_USER_ID, data, result)

        print(f"{name}: level={result.risk_level.label} probability={result.probability:.2f}")
        print(f"  addicted={result.is_addicted} anomaly={result.anomaly_detected}")
        print(f"  features={[(f.name, f.value, f.contribution) for f in result.features]}")
        print(f"  entry={entry.entry_id} @ {entry.timestamp}")
        print(render_text(builder.build(result)))
        print()

    baseline = await recorder.get_baseline_progress(DEMO_USER_ID)
    latest = await recorder.get_latest_progress(DEMO_USER_ID)
    history = await recorder.get_progress_history(DEMO_USER_ID)

    print("--- History ---")
    print(f"entries={len(history)}")
    if baseline and latest:
        change = latest.result.probability - baseline.result.probability
        print(f"baseline={baseline.result.probability:.2f} latest={latest.result.probability:.2f} change={change:+.2f}")

    assistant = build_assistant_from_settings(settings, recorder, DEMO_USER_ID)
    reply = await assistant.send(DEMO_CHAT_PROMPT)
    chat_log = await recorder.get_chat_history(DEMO_USER_ID, assistant.session_id)

    print()
    print("--- Assistant ---")
    print(f"you: {DEMO_CHAT_PROMPT}")
    print(f"assistant: {reply}")
    print(f"chat_messages={len(chat_log)}")


def main() -> None:
    load_env_file(Path.cwd() / ".env")
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
