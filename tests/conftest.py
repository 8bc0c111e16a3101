from __future__ import annotations

from pathlib import Path
from typing import Callable

import httpx
import pytest

FIXTURES = Path(__file__).parent / "fixtures"


def fixture_text(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


@pytest.fixture
def conditions_html() -> str:
    return fixture_text("norquay_conditions.html")


@pytest.fixture
def make_client() -> Callable[..., httpx.Client]:
    """Build an httpx client whose transport answers with ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    return _make
