"""Habitat base layout validation package."""

from .models import Module, Corridor, MissionParameters, Evaluation  # noqa: F401
from .layout import LayoutModel  # noqa: F401
from .evaluation import evaluate  # noqa: F401
from .session import Session  # noqa: F401
from .io_schema import load_design, save_design  # noqa: F401

__all__ = [
    "Module",
    "Corridor",
    "MissionParameters",
    "Evaluation",
    "LayoutModel",
    "evaluate",
    "Session",
    "load_design",
    "save_design",
]
