"""Shared fixtures: a deterministic fake engine and a fake nanosecond clock."""

import pytest

from uaprobe.diag.engine.base import BaseEngine, TreeObserver
from uaprobe.diag.engine.models import ClassificationResult, FieldValue, TreeNode
from uaprobe.diag.pipeline.adapter import ClassificationAdapter


class FakeEngine(BaseEngine):
    """Keyword-driven engine.

    - every payload gets DeviceClass, AgentName (standard) and AgentVersion
    - ``bad`` in the payload drops DeviceClass to confidence -1
    - ``syntax`` sets the syntax-error flag, ``ambig`` the ambiguity flag
    """

    STANDARD = {"DeviceClass", "AgentName"}

    def __init__(self):
        self.calls = []

    def analyze(self, payload):
        self.calls.append(payload)
        fields = {
            "DeviceClass": FieldValue("Desktop", -1 if "bad" in payload else 10),
            "AgentName": FieldValue("Fake", 5),
            "AgentVersion": FieldValue("1.0", 5),
        }
        return ClassificationResult(
            payload=payload,
            fields=fields,
            has_syntax_error="syntax" in payload,
            has_ambiguity="ambig" in payload,
        )

    def all_field_names(self):
        return ["DeviceClass", "AgentVersion", "AgentName", "OperatingSystemName"]

    def standard_field_names(self):
        return set(self.STANDARD)

    def walk(self, payload, observer: TreeObserver):
        observer.inform(TreeNode("agent", payload))
        for i, word in enumerate(payload.split(), start=1):
            observer.inform(TreeNode(f"agent.({i})word", word, consulted=i % 2 == 1))


class FakeClock:
    """Advances by ``step`` nanoseconds on every call."""

    def __init__(self, start=0, step=1_000_000):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


@pytest.fixture()
def fake_engine():
    return FakeEngine()


@pytest.fixture()
def adapter(fake_engine):
    return ClassificationAdapter(fake_engine)


@pytest.fixture()
def fake_clock():
    return FakeClock()
