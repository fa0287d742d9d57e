"""Exception types raised by the scoring engine.

Only configuration problems are raised as errors. Malformed questionnaire data
(unparseable numbers, missing fields, unknown options) is normalized to a zero
score with an "N/A" label and never surfaces as an exception.
"""


class ConfigurationError(Exception):
    """Catalog, weight table or category mismatch.

    Raised for an unknown category, a criterion ID missing from the catalog, or
    YAML tables that fail validation. Not recoverable at runtime.
    """


class ProposalStateError(ValueError):
    """Illegal proposal lifecycle transition (e.g. re-categorizing a scored proposal)."""
