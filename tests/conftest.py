import os
import random
from pathlib import Path

import numpy as np
import pytest

from finite_screen.core.config import SimulationParameters

try:
    import torch  # type: ignore
except Exception:  # pragma: no cover - optional import for device fixture
    torch = None  # type: ignore

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"


def pytest_configure(config: pytest.Config) -> None:  # noqa: ARG001
    config.addinivalue_line("markers", "gpu: marks tests that require a CUDA GPU")


@pytest.fixture(autouse=True)
def seed_rng() -> None:
    random.seed(0)
    np.random.seed(0)
    os.environ["PYTHONHASHSEED"] = "0"


@pytest.fixture()
def device() -> str:
    if torch is None:
        return "cpu"
    return "cuda" if torch.cuda.is_available() else "cpu"


@pytest.fixture()
def bench() -> SimulationParameters:
    """40 mm slit, 300 mm screen, 32 mm wavelength, 600 mm legs, bare edges."""
    return SimulationParameters()


@pytest.fixture()
def bench_angles() -> np.ndarray:
    return np.arange(-60, 61, dtype=np.float64)


@pytest.fixture()
def examples_dir() -> Path:
    return EXAMPLES_DIR
