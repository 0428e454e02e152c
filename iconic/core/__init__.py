"""Iconic Core - constants and input validation.

Import specific functions from submodules:
    from iconic.core.constants import Category, ErrorCode
    from iconic.core.validators import validate_rule, ValidationError

Validators depend on the rule models, so they are not imported here.
"""

from iconic.core import constants

__all__ = ["constants"]
