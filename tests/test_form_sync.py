"""
Progress Recorder Test Suite

Validates:
- Entry creation (uuid, ISO-8601 UTC timestamp)
- Latest / baseline / history queries
- Form mirror payload and best-effort behaviour
- Persistence failures surface as PersistenceError
- Chat log saving and retrieval
"""

import json
import uuid
from datetime import datetime
from urllib.parse import parse_qs

import httpx
import pytest

from gadget_risk.analysis_schema import AIAnalysis
from gadget_risk.form_sync import FormFieldIds, GoogleFormMirror, ProgressRecorder
from gadget_risk.reference_data import create_sample_assessments
from gadget_risk.scoring import score_assessment
from gadget_risk.storage import InMemoryProgressStore, PersistenceError

FORM_URL = "https://forms.example.test/formResponse"


def mock_client(status_code=200, requests=None):
    def handler(request):
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code)
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class BrokenStore(InMemoryProgressStore):
    def append(self, entry):
        raise PersistenceError("disk full")


@pytest.fixture
def recorder():
    return ProgressRecorder(InMemoryProgressStore())


# ============================================================
# SAVING AND QUERYING
# ============================================================

class TestSaveProgress:

    @pytest.mark.asyncio
    async def test_entry_has_id_and_utc_timestamp(self, recorder):
        data = create_sample_assessments()["initial"]
        result = score_assessment(data)

        entry = await recorder.save_progress("user-1", data, result)

        uuid.UUID(entry.entry_id)
        assert datetime.fromisoformat(entry.timestamp).utcoffset().total_seconds() == 0
        assert entry.inputs == data
        assert entry.result == result

    @pytest.mark.asyncio
    async def test_empty_user_rejected(self, recorder):
        data = create_sample_assessments()["initial"]

        with pytest.raises(PersistenceError):
            await recorder.save_progress("", data, score_assessment(data))

    @pytest.mark.asyncio
    async def test_store_failure_is_persistence_error(self):
        recorder = ProgressRecorder(BrokenStore())
        data = create_sample_assessments()["initial"]

        with pytest.raises(PersistenceError):
            await recorder.save_progress("user-1", data, score_assessment(data))

    @pytest.mark.asyncio
    async def test_latest_and_baseline(self, recorder):
        samples = create_sample_assessments()
        saved = []
        for name in ("balanced", "initial", "high_risk"):
            data = samples[name]
            saved.append(await recorder.save_progress("user-1", data, score_assessment(data)))

        assert await recorder.get_latest_progress("user-1") == saved[-1]
        assert await recorder.get_baseline_progress("user-1") == saved[0]
        assert await recorder.get_progress_history("user-1", "asc") == saved

    @pytest.mark.asyncio
    async def test_queries_for_unknown_or_empty_user(self, recorder):
        assert await recorder.get_progress_history("") == []
        assert await recorder.get_latest_progress("ghost") is None
        assert await recorder.get_baseline_progress("") is None


# ============================================================
# FORM MIRROR
# ============================================================

class TestGoogleFormMirror:

    @pytest.mark.asyncio
    async def test_payload_fields(self, analysis_json):
        requests = []
        mirror = GoogleFormMirror(FORM_URL, client=mock_client(requests=requests))
        recorder = ProgressRecorder(InMemoryProgressStore(), mirror)
        data = create_sample_assessments()["high_risk"]
        result = score_assessment(data).with_analysis(AIAnalysis.model_validate_json(analysis_json))

        entry = await recorder.save_progress("user-1", data, result)

        assert len(requests) == 1
        assert str(requests[0].url) == FORM_URL
        fields = {k: v[0] for k, v in parse_qs(requests[0].content.decode()).items()}
        ids = FormFieldIds()
        assert fields[ids.user_id] == "user-1"
        assert fields[ids.timestamp] == entry.timestamp
        assert json.loads(fields[ids.input_json])["socialMediaUsageHours"] == 4
        assert json.loads(fields[ids.prediction_json]) == {
            "isAddicted": True,
            "probability": 0.85,
            "riskLevel": "High",
            "anomalyDetected": False,
        }
        assert json.loads(fields[ids.ai_json])["disclaimer"] == "This is not medical advice."

    @pytest.mark.asyncio
    async def test_missing_analysis_sends_empty_object(self, recorder):
        mirror = GoogleFormMirror(FORM_URL)
        data = create_sample_assessments()["initial"]
        entry = await recorder.save_progress("user-1", data, score_assessment(data))

        form = mirror.build_form_data(entry)

        assert form[FormFieldIds().ai_json] == "{}"

    @pytest.mark.asyncio
    async def test_mirror_failure_still_saves_locally(self):
        store = InMemoryProgressStore()
        mirror = GoogleFormMirror(FORM_URL, client=mock_client(status_code=500))
        recorder = ProgressRecorder(store, mirror)
        data = create_sample_assessments()["initial"]

        entry = await recorder.save_progress("user-1", data, score_assessment(data))

        assert store.list_entries("user-1") == [entry]

    @pytest.mark.asyncio
    async def test_submit_reports_transport_errors(self, recorder):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        mirror = GoogleFormMirror(FORM_URL, client=client)
        data = create_sample_assessments()["initial"]
        entry = await recorder.save_progress("user-1", data, score_assessment(data))

        assert await mirror.submit(entry) is False


# ============================================================
# CHAT LOGS
# ============================================================

class TestChatLogs:

    @pytest.mark.asyncio
    async def test_save_and_fetch(self, recorder):
        await recorder.save_chat_message("user-1", "user", "How do I sleep better?", "s1")
        await recorder.save_chat_message("user-1", "model", "Try a device cutoff.", "s1")

        history = await recorder.get_chat_history("user-1", "s1")

        assert [(m.role, m.content) for m in history] == [
            ("user", "How do I sleep better?"),
            ("model", "Try a device cutoff."),
        ]
        assert all(m.timestamp for m in history)

    @pytest.mark.asyncio
    async def test_limit_keeps_most_recent(self, recorder):
        for i in range(5):
            await recorder.save_chat_message("user-1", "user", f"msg {i}", "s1")

        history = await recorder.get_chat_history("user-1", "s1", limit=2)

        assert [m.content for m in history] == ["msg 3", "msg 4"]

    @pytest.mark.asyncio
    async def test_missing_session_is_noop(self, recorder):
        assert await recorder.save_chat_message("user-1", "user", "hi") is None
        assert await recorder.get_chat_history("user-1") == []

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(self, recorder):
        with pytest.raises(ValueError):
            await recorder.save_chat_message("user-1", "robot", "hi", "s1")
