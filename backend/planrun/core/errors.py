"""Errors raised by plan normalization and persistence."""


class PlanError(Exception):
    """Base for training plan errors."""


class PlanStructureError(PlanError, ValueError):
    """Raw plan is structurally unusable (no weeks list, bad start date). Raised before any I/O."""


class PlanSaveError(PlanError):
    """A statement failed while persisting a plan; the transaction was rolled back."""
