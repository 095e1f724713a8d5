"""Exceptions raised by the climate_workshop pipeline."""


class ClimateWorkshopError(Exception):
    """Base class for all pipeline errors."""


class SourceUnavailable(ClimateWorkshopError):
    """The GHCND service could not be reached or returned an unusable payload."""


class UnknownStation(ClimateWorkshopError):
    """The GHCND service does not know the requested station id."""


class UnknownStationReference(ClimateWorkshopError):
    """Raw observations refer to a station missing from the registry."""


class ProjectionError(ClimateWorkshopError):
    """A coordinate is outside the valid domain of the projection."""


class InsufficientData(ClimateWorkshopError):
    """Not enough (or degenerate) data to fit or evaluate the trend model."""


class DatasetNotFound(ClimateWorkshopError, FileNotFoundError):
    """No stored dataset under the requested name."""
