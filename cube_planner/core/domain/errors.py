"""
Planning error taxonomy.

Compilation either returns a complete plan or raises one of these errors
before any step has been built.
"""

from __future__ import annotations


class PlanError(Exception):
    """Base class for every error raised while compiling a plan."""


class InvalidRequest(PlanError, ValueError):
    """The request (or the metadata it resolves to) cannot be planned."""


class MetadataResolutionFailure(PlanError, LookupError):
    """Cube or table metadata could not be resolved."""


class NotFound(MetadataResolutionFailure):
    """Raised by metadata stores when a named object does not exist."""


class SegmentNotFound(NotFound, InvalidRequest):
    """No segment with the requested name and status exists on the cube."""


class DescriptorGenerationFailure(PlanError, RuntimeError):
    """Flat table script generation failed."""
