"""
Shared primitive (str) enums describing all kinds of valid states.
"""

from __future__ import annotations

from enum import Enum


class PharmaceuticalForm(Enum):
    TABLET = "tablett"
    CAPSULE = "kapsel"
    EFFERVESCENT_TABLET = "brusetablett"
    EXTENDED_RELEASE_TABLET = "depottablett"
    SUPPOSITORY = "stikkpille"
    TRANSDERMAL_PATCH = "depotplaster"
    SUBLINGUAL_TABLET = "sublingvaltablett"
    SUBLINGUAL_FILM = "sublingvalfilm"
    LYOPHILISATE_TABLET = "lyofilisattablett"
    NASAL_SPRAY = "nesespray"
    ORAL_MIXTURE = "mikstur"
    ORAL_DROPS = "dråper"
    INJECTION = "injeksjon"
    INFUSION_INJECTION_SOLUTION = "infusjons-/injeksjonsvæske"
    DEPOT_INJECTION_SOLUTION = "depotinjeksjonsvæske"
    OTHER = "annet"

    @classmethod
    def from_text(cls, text: str | None) -> PharmaceuticalForm | None:
        """
        Map free form text to a known form. Text that names no known form
        is `OTHER`; missing text is `None`.
        """
        if text is None or not text.strip():
            return None
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.OTHER


class AdministrationRoute(Enum):
    ORAL = "oral"
    PARENTERAL = "parenteral"
    TRANSDERMAL = "transdermal"
    INTRANASAL = "intranasal"
    SUBLINGUAL = "sublingual"
    RECTAL = "rectal"


class Reason(Enum):
    """
    Outcome of an OMEQ calculation. Everything except `OK` explains why no
    value could be computed.
    """

    OK = "ok"
    MISSING_INPUT = "missing-input"
    MISSING_STRENGTH = "missing-strength"
    NO_ROUTE = "no-route"
    NO_OMEQ_FACTOR = "no-omeq-factor"
    UNSUPPORTED_FORM = "unsupported-form"
    UNSUPPORTED_CODEINE = "unsupported-codeine"
    UNSUPPORTED_METHADONE = "unsupported-methadone"
    UNSUPPORTED_OXYCODONE = "unsupported-oxycodone"
    UNSUPPORTED_HYDROMORPHONE_PARENTERAL = (
        "unsupported-hydromorphone-parenteral"
    )
    UNSUPPORTED_KETOBEMIDONE = "unsupported-ketobemidone"
    UNSUPPORTED_MORPHINE_DROPS_OR_PARENTERAL = (
        "unsupported-morphine-drops-or-parenteral"
    )

    @property
    def is_exclusion(self) -> bool:
        """Fixed clinical exclusion rather than missing data."""
        return self in _EXCLUSIONS


_EXCLUSIONS = frozenset({
    Reason.UNSUPPORTED_HYDROMORPHONE_PARENTERAL,
    Reason.UNSUPPORTED_KETOBEMIDONE,
    Reason.UNSUPPORTED_MORPHINE_DROPS_OR_PARENTERAL,
})


class IssueKind(Enum):
    DUPLICATE_CODE = "duplicate-code"
    UNPARSABLE_STRENGTH = "unparsable-strength"
    MISSING_NAME = "missing-name"
    MALFORMED_RECORD = "malformed-record"
