"""
Shared fixtures for mdpp tests

RecordingSession stands in for the interpreter where a test only needs to
see which statements were sent, not run them.
"""

from typing import Dict, List, Optional

import pytest

from mdpp.models.state import ProcessorState


class RecordingSession:
    """
    In-memory interpreter session

    evaluate() answers from a canned dict, falling back to "<statement>";
    every request is recorded in order as ("evaluate" | "execute", statement).
    """

    def __init__(self, answers: Optional[Dict[str, str]] = None) -> None:
        self.answers = answers or {}
        self.calls: List[tuple] = []
        self.variables: Dict[str, str] = {}

    def evaluate(self, statement: str) -> str:
        self.calls.append(("evaluate", statement))
        return self.answers.get(statement, f"<{statement}>")

    def execute(self, statement: str) -> None:
        self.calls.append(("execute", statement))

    def assign(self, name: str, value: str) -> None:
        self.variables[name] = value
        self.execute(f"{name}='{value}'")


@pytest.fixture
def session() -> RecordingSession:
    return RecordingSession()


@pytest.fixture
def state(session: RecordingSession) -> ProcessorState:
    return ProcessorState(session=session)
