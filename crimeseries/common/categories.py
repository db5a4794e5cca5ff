"""Crime categories and their resolution against source identifiers."""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, Mapping

from crimeseries.common.errors import ConfigError


class CrimeCategory(str, Enum):
    HOMICIDIOS = "homicidios"
    LESIONES_PERSONALES = "lesiones_personales"
    HURTO_PERSONAS = "hurto_personas"
    HURTO_RESIDENCIAS = "hurto_residencias"
    HURTO_COMERCIO = "hurto_comercio"
    HURTO_AUTOMOTORES = "hurto_automotores"
    HURTO_MOTOCICLETAS = "hurto_motocicletas"
    VIOLENCIA_INTRAFAMILIAR = "violencia_intrafamiliar"
    DELITOS_SEXUALES = "delitos_sexuales"
    EXTORSION = "extorsion"
    SECUESTRO = "secuestro"
    AMENAZAS = "amenazas"
    TERRORISMO = "terrorismo"


def parse_category(tag: str) -> CrimeCategory:
    try:
        return CrimeCategory(tag)
    except ValueError as exc:
        known = ", ".join(category.value for category in CrimeCategory)
        raise ConfigError(f"Unknown crime category '{tag}' (known: {known})") from exc


def compile_patterns(patterns: Mapping[str, str]) -> dict[CrimeCategory, re.Pattern]:
    compiled: dict[CrimeCategory, re.Pattern] = {}
    for tag, pattern in patterns.items():
        category = parse_category(tag)
        try:
            compiled[category] = re.compile(pattern)
        except re.error as exc:
            raise ConfigError(f"Invalid pattern for category {tag}: {pattern!r}") from exc
    return compiled


def resolve_category_sources(
    identifiers: Iterable[str],
    patterns: Mapping[str, str],
) -> dict[CrimeCategory, list[str]]:
    """Map each category to the sorted source identifiers its pattern matches.

    Matching is a case-sensitive regex search. An identifier may feed more than
    one category; a category may end up with no identifiers at all.
    """
    compiled = compile_patterns(patterns)
    ordered = sorted(set(identifiers))
    return {
        category: [identifier for identifier in ordered if regex.search(identifier)]
        for category, regex in compiled.items()
    }
