from __future__ import annotations

import pytest

from fakes import Workspace


@pytest.fixture
def ws():
    return Workspace()


@pytest.fixture
def service(ws):
    return ws.service()
