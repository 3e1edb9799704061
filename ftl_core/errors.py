"""Errors raised by the FTL engine."""


class FTLInputError(TypeError, ValueError):
    """
    Invalid usage of the engine: wrong argument types or impossible values.

    Distinct from a non-compliant verdict, which is returned as a normal
    ComplianceResult.
    """
