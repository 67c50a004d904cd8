# backend/mutations/__init__.py
# Mutation normalization

from .models import MutationStatus, NormalizedMutation
from .normalizer import (
    MutationNormalizer,
    OrderKuotaNormalizer,
    QiosPayNormalizer,
    AtlanticNormalizer,
    PakasirNormalizer,
    NORMALIZERS,
    get_normalizer,
    normalize
)

__all__ = [
    "MutationStatus",
    "NormalizedMutation",
    "MutationNormalizer",
    "OrderKuotaNormalizer",
    "QiosPayNormalizer",
    "AtlanticNormalizer",
    "PakasirNormalizer",
    "NORMALIZERS",
    "get_normalizer",
    "normalize"
]
