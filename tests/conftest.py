"""Shared test fixtures."""

from datetime import date
from typing import List, Optional, Union

import pytest

from common.models import GenerationRequest, GenerationResult, TokenUsage
from gateway.extraction_gateway import ExtractionGateway

FIXED_TODAY = date(2025, 3, 10)


class FakeGateway(ExtractionGateway):
    """Gateway returning canned results (or raising canned errors) in order."""

    def __init__(self, *outcomes: Union[str, GenerationResult, Exception]):
        self.outcomes = list(outcomes)
        self.requests: List[GenerationRequest] = []

    async def invoke(self, request: GenerationRequest) -> GenerationResult:
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, str):
            return GenerationResult(
                text=outcome,
                usage=TokenUsage(prompt_tokens=10, completion_tokens=20, total_tokens=30),
            )
        return outcome


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_TODAY."""
    return lambda: FIXED_TODAY
