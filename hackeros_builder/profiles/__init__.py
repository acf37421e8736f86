"""Profile translation module.

This module handles:
- Loading ini-style `*.profile` descriptions
- Validating them against the profile schema
- Writing live-build package lists
- Surfacing boot parameters for `lb config`
"""

from hackeros_builder.profiles.schema import (
    ProfileSchema,
    ProfileTranslationResult,
    TranslationResult,
)

__all__ = ["ProfileSchema", "ProfileTranslationResult", "TranslationResult"]

# Submodules: hackeros_builder.profiles.io, hackeros_builder.profiles.translator
