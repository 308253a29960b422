import pytest


async def _no_sleep(ms: int) -> None:
    return None


@pytest.fixture(autouse=True)
def no_settle_delays(monkeypatch):
    monkeypatch.setattr("thumbshot.banners.handler.sleep_ms", _no_sleep)
