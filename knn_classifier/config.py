"""Configuration helpers for the k-NN classifier."""

from __future__ import annotations

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent
PACKAGE_ANCHOR = BASE_DIR.name


def resolve_path(path_like: Union[str, Path]) -> Path:
    """Return an absolute path, anchoring package-relative names to the package."""
    candidate = Path(path_like).expanduser()
    if candidate.is_absolute():
        return candidate

    parts = candidate.parts
    if parts and parts[0] == PACKAGE_ANCHOR:
        anchor = PROJECT_ROOT
    else:
        anchor = Path.cwd()
    return (anchor / candidate).resolve()


@dataclass(slots=True)
class KnnConfig:
    """Neighbor count, CSV layout and evaluation split settings."""

    k: int = 5
    delimiter: str = ","
    label_col: int = 0
    skip_header: bool = False
    train_fraction: float = 2 / 3
    seed: Optional[int] = None
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")
        if self.label_col < 0:
            raise ValueError(f"label_col must be >= 0, got {self.label_col}")
        if not 0.0 < self.train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {self.train_fraction}")

    def to_dict(self) -> dict:
        return asdict(self)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_config(env_path: Optional[Union[str, Path]] = None) -> KnnConfig:
    """
    Build a KnnConfig from KNN_* environment variables.

    A ``.env`` file (``env_path`` or the one in the working directory) is
    loaded first; variables already set in the environment win.
    """
    load_dotenv(dotenv_path=env_path)
    seed = os.getenv("KNN_SEED")
    return KnnConfig(
        k=int(os.getenv("KNN_K", "5")),
        delimiter=os.getenv("KNN_DELIMITER", ","),
        label_col=int(os.getenv("KNN_LABEL_COL", "0")),
        skip_header=_env_bool(os.getenv("KNN_SKIP_HEADER", "false")),
        train_fraction=float(os.getenv("KNN_TRAIN_FRACTION", str(2 / 3))),
        seed=int(seed) if seed else None,
        n_jobs=int(os.getenv("KNN_N_JOBS", "1")),
    )
