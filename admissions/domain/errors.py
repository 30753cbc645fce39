from typing import Iterable


class AdmissionsError(Exception):
    """Base class for admissions domain errors."""


class ConfigResolutionFailure(AdmissionsError):
    """Academic year could not be determined from the configuration store."""


class CounterContention(AdmissionsError):
    """Transactional increment of an application counter kept failing."""

    def __init__(self, year_key: str, attempts: int):
        super().__init__(f"counter {year_key} not incremented after {attempts} attempts")
        self.year_key = year_key
        self.attempts = attempts


class NotFound(AdmissionsError):
    """Application not found by application ID nor by record key."""

    def __init__(self, key: str):
        super().__init__(f"application {key!r} not found")
        self.key = key


class InvalidTransition(AdmissionsError):
    def __init__(self, current: str, target: str):
        super().__init__(f"cannot move application from {current!r} to {target!r}")
        self.current = current
        self.target = target


class IncompleteApplication(AdmissionsError):
    """Submission guard failed: required sections are missing."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__("incomplete application, missing: " + ", ".join(self.missing))
