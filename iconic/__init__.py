"""Iconic: rule-driven icons and colors for vault items.

Packages:
    iconic.core            constants, error codes, validators
    iconic.infrastructure  logging, configuration, caching
    iconic.items           items, attribute resolution, vault scanning
    iconic.rules           rule models, evaluation, storage, resolution
"""

from iconic.core.constants import ICONIC_VERSION

__version__ = ICONIC_VERSION

__all__ = ["__version__"]
