"""PyTest configuration shared by the pushpipe tests.

Provides isolated configuration and a deterministic set of sample records.
"""
from dataclasses import dataclass, field
from typing import List
import logging
import os

import pytest

from pushpipe.util.config import reset_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Student:
    id: int
    name: str
    age: int
    scores: List[int] = field(default_factory=list, compare=False)


NAMES = ["Tom", "Kate", "Lucy", "Jim", "Jack", "King", "Lee", "Mask", "Tom", "Kate", "Lucy"]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Point the config file at an empty home directory and drop PUSHPIPE_* variables.

    Yields the temporary home directory so tests can write a ~/.pushpipe.toml.
    """
    for key in list(os.environ.keys()):
        if key.startswith("PUSHPIPE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    reset_config()
    yield tmp_path
    reset_config()


@pytest.fixture
def students():
    """Eleven students aged 15 through 25, in increasing id order.

    Ages are listed out of order so filters and sorts have work to do.
    """
    ages = [19, 15, 22, 17, 25, 21, 16, 23, 18, 20, 24]
    return [
        Student(id=i + 1, name=NAMES[i], age=age, scores=[60 + (i * 7) % 40, 70 + (i * 3) % 30, 95 - i])
        for i, age in enumerate(ages)
    ]
