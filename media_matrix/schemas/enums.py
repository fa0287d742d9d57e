"""Enums for proposal categories and questionnaire input kinds.

Category values are stable identifiers used as keys in the YAML weight tables.
Display labels are what the questionnaire shows; older stored proposals may
still carry legacy labels, which parse() maps onto the current categories.
"""

from enum import Enum

from media_matrix.errors import ConfigurationError


class ProposalCategory(str, Enum):
    """Media-buy type - selects applicable criteria and the weight table."""

    PORTAL_BLOG = "portal_blog"
    PORTAL_SOCIAL = "portal_social"
    TV_BUNDLE = "tv_bundle"
    YOUTUBE_BUNDLE = "youtube_bundle"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    @classmethod
    def parse(cls, text) -> "ProposalCategory":
        """Resolve a value, member name, display label or legacy label.

        Raises:
            ConfigurationError: if the text names no known category
        """
        if isinstance(text, cls):
            return text
        key = str(text).strip()
        for category in cls:
            if key in (category.value, category.name, category.label):
                return category
        legacy = _LEGACY_LABELS.get(key)
        if legacy is not None:
            return legacy
        raise ConfigurationError(f"Unknown proposal category: {text!r}")


_CATEGORY_LABELS = {
    ProposalCategory.PORTAL_BLOG: "Portal/Blog",
    ProposalCategory.PORTAL_SOCIAL: "Redes Sociais + Portal/Blog",
    ProposalCategory.TV_BUNDLE: "Televisão + Portal/Blog + Redes Sociais",
    ProposalCategory.YOUTUBE_BUNDLE: "Canal Youtube + Portal/Blog + Redes Sociais",
}

# Labels written by earlier releases of the questionnaire
_LEGACY_LABELS = {
    "Televisão + Portal/Blog + Redes Sociais + Outras Ações": ProposalCategory.TV_BUNDLE,
    "Portal/Blog + Redes Sociais": ProposalCategory.PORTAL_SOCIAL,
}


class InputKind(str, Enum):
    """How a criterion's raw answer is matched against its options."""

    SELECT = "select"
    NUMERIC = "numeric"


class Unit(str, Enum):
    """Unit of a numeric criterion - decides how raw strings are parsed."""

    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    COUNT = "count"
