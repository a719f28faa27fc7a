"""Exceptions raised by the habitat layout toolkit.

None of these are fatal to an interactive session: callers reject the single
operation that failed and keep the session usable.
"""

from __future__ import annotations

from typing import Optional


class HabitatLayoutError(Exception):
    """Base exception for layout operations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidModuleType(HabitatLayoutError, ValueError):
    """Raised when a module type has no entry in the requirement table."""

    def __init__(self, module_type: str):
        super().__init__(f"Unknown module type '{module_type}'")
        self.module_type = module_type


class InvalidEnvironment(HabitatLayoutError, ValueError):
    """Raised when an environment id is not in the registry."""

    def __init__(self, environment: str):
        super().__init__(f"Unknown environment '{environment}'")
        self.environment = environment


class UnknownModule(HabitatLayoutError, KeyError):
    """Raised when no placed module carries the given id."""

    def __init__(self, module_id: str):
        super().__init__(f"No module with id '{module_id}'")
        self.module_id = module_id


class UnknownCorridor(HabitatLayoutError, KeyError):
    """Raised when no corridor carries the given id."""

    def __init__(self, corridor_id: str):
        super().__init__(f"No corridor with id '{corridor_id}'")
        self.corridor_id = corridor_id


class UnknownScenario(HabitatLayoutError, KeyError):
    """Raised when a mission scenario preset does not exist."""

    def __init__(self, scenario_id: str):
        super().__init__(f"Unknown scenario '{scenario_id}'")
        self.scenario_id = scenario_id


class MalformedPersistedState(HabitatLayoutError, ValueError):
    """Raised when a saved design cannot be read at all."""


class AdvisoryServiceError(HabitatLayoutError):
    """Raised when the remote advisory service fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
