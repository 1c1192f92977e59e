"""Shared fixtures and fakes for the gadget_risk test suite."""

import json
import os
import sys
from types import SimpleNamespace

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

from gadget_risk.reference_data import create_initial_assessment


VALID_ANALYSIS = {
    "summary": "Your usage is concentrated in social media and gaming.",
    "risk_level_explanation": "Screen, social and gaming hours all exceed the high-risk thresholds.",
    "anomaly_explanation": "Your screen time is within the usual range.",
    "recommendations": {
        "usage_control": ["Set a 2 hour daily cap on social apps."],
        "sleep_hygiene": ["Put the phone away an hour before bed."],
        "productivity_focus": ["Work in 45 minute focus blocks."],
        "mental_wellbeing": ["Take a short walk without your phone."],
        "daily_action_plan": ["Turn off notifications", "Walk 20 minutes", "Read before bed"],
    },
    "progress_tracking_tip": "Check your weekly screen-time report every Sunday.",
    "disclaimer": "This is not medical advice.",
}


class FakeCompletions:
    """Stands in for client.chat.completions; returns canned text or raises."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAIClient:
    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content=content, error=error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def initial_assessment():
    return create_initial_assessment()


@pytest.fixture
def analysis_json():
    return json.dumps(VALID_ANALYSIS)
