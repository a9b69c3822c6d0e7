from typing import Generator

import pytest

from services.suretax_transport import set_http_transport


@pytest.fixture(autouse=True)
def _reset_transport_override() -> Generator[None, None, None]:
    set_http_transport(None)
    yield
    set_http_transport(None)
