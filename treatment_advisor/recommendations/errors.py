from __future__ import annotations


class TreatmentAdvisorError(Exception):
    """Base class for errors surfaced by the recommendation engine."""


class ValidationError(TreatmentAdvisorError):
    """The request is missing required data; nothing was scored."""


class RepositoryError(TreatmentAdvisorError):
    """The work-instruction catalog could not be read."""


class PersistenceError(TreatmentAdvisorError):
    """A recommendation could not be saved; no record was created."""
