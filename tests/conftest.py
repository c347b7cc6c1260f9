import pytest

from flashdeck.application.study_service import StudyService
from flashdeck.domain.constants import MS_PER_DAY
from flashdeck.infrastructure.json_store import JsonDeckRepository

# 2023-11-14T22:13:20Z
T0 = 1_700_000_000_000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, days: float = 0, ms: int = 0) -> None:
        self.now += int(days * MS_PER_DAY) + ms


@pytest.fixture(autouse=True)
def mock_home(tmp_path, monkeypatch):
    """Point HOME at a temp dir so no real config or deck store is touched."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "FLASHDECK_DATA_FILE",
        "FLASHDECK_DUE_LIMIT",
        "FLASHDECK_VERBOSE",
        "FLASHDECK_LOG_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "store" / "decks.json"


@pytest.fixture
def repo(data_file):
    return JsonDeckRepository(data_file)


@pytest.fixture
def service(repo, clock):
    return StudyService(repo, clock=clock)
