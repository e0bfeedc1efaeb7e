from pathlib import Path

import pytest

from pokerledger.engine.player import SeatedPlayer
from pokerledger.engine.run_scripted_hand import run_script
from pokerledger.engine.script_loader import load_script

DATA_DIR = Path(__file__).parent / "data"


def make_players(count: int) -> list[SeatedPlayer]:
    return [SeatedPlayer(player_id=f"p{i}", name=f"Player{i}", seat=i + 1) for i in range(count)]


@pytest.fixture
def players():
    """Factory for seat-ordered players p0..p{n-1}."""
    return make_players


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def run_named_script():
    def _run(name: str):
        return run_script(load_script(DATA_DIR / "scripts" / f"{name}.json"))
    return _run
