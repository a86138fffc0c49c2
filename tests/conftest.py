# FILE: tests/conftest.py

import json
import os
import sys
import tempfile
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# The app module reads settings at import time; keep it off the network and disk
_scratch = tempfile.mkdtemp(prefix="assignment_hub_tests_")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("DATA_DIR", os.path.join(_scratch, "data"))
os.environ.setdefault("LOGS_DIR", os.path.join(_scratch, "logs"))
os.environ.setdefault("PROVIDER_IO_CAPTURE", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LLM_MODE", "online")

import pytest

from assignment_hub.config import Settings
from assignment_hub.providers.registry import ProviderRegistry
from assignment_hub.services.document_store import InMemoryDocumentStore


class FakeProvider:
    """Scripted provider: each call pops the next response (str) or raises it (Exception)"""

    def __init__(self, responses=None, model="fake-model"):
        self.responses = list(responses or [])
        self.model = model
        self.prompts = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def generate(self, prompt, temperature=0.0, max_tokens=500):
        self.prompts.append(prompt)
        if not self.responses:
            raise RuntimeError("FakeProvider has no scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return {"text": response, "model": self.model, "usage": {}}


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to a temp directory"""
    return Settings(
        data_dir=str(tmp_path / "data"),
        logs_dir=str(tmp_path / "logs"),
        store_backend="memory",
        provider_io_capture=False,
        rate_limit_enabled=False,
    )


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def registry(settings, fake_provider):
    return ProviderRegistry(settings, providers={"fake": fake_provider})


@pytest.fixture
def student_record():
    """Student document as stored in the students collection"""
    return {
        "id": "stu_1",
        "firstName": "Maya",
        "grade": "5th Grade",
        "strengths": ["Reading"],
        "weaknesses": ["Fractions"],
        "learningStyle": ["Visual"],
        "parentId": "par_1",
        "email": "maya.parent@example.com",
    }


@pytest.fixture
def criteria_payload():
    """Criteria as a client would send them"""
    return {
        "subject": "Math",
        "topics": "Fractions, Decimals",
        "purpose": "Practice",
        "difficulty": "Medium",
        "format": ["MCQ", "Short Answer"],
        "numQuestions": 3,
        "createdBy": "parent",
    }


def make_generation_text(with_explanation=True, fenced=False):
    """A model reply with two MCQs and one short-answer question"""
    payload = {
        "questions": [
            {
                "id": "q1",
                "type": "MCQ",
                "text": "What is 1/2 + 1/4?",
                "options": ["1/4", "2/4", "3/4", "1"],
                "correctAnswer": "3/4",
            },
            {
                "id": "q2",
                "type": "MCQ",
                "text": "Which decimal equals 1/5?",
                "options": ["0.5", "0.2", "0.25", "0.15"],
                "correctAnswer": "0.2",
            },
            {
                "id": "q3",
                "type": "Short Answer",
                "text": "Explain how to compare 0.3 and 0.25.",
            },
        ]
    }
    if with_explanation:
        payload["explanation"] = "Fractions and decimals are two ways to write parts of a whole."
        payload["examples"] = [
            {"problem": "Write 1/2 as a decimal.", "solution": "0.5"},
            {"problem": "Write 0.75 as a fraction.", "solution": "3/4"},
        ]

    text = json.dumps(payload)
    if fenced:
        return f"Sure! Here is your assignment:\n```json\n{text}\n```\nLet me know if you need more."
    return text


@pytest.fixture
def generation_text():
    return make_generation_text()
