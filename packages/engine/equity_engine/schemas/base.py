"""Base classes and type system for equity engine models.

This module provides the foundational types and base classes shared by the
entry, snapshot and configuration schemas.
"""

from decimal import Decimal
from typing import Annotated
from pydantic import BaseModel, Field, ConfigDict

# =============================================================================
# Base Model
# =============================================================================

class DomainModel(BaseModel):
    """Base class for all domain models.

    Provides common configuration for all Pydantic models in the engine:
    - Validation on assignment for runtime safety
    - Support for Decimal and datetime types
    - Enum value serialization
    """

    model_config = ConfigDict(
        frozen=False,  # Entries are mutated in place by the ledger
        validate_assignment=True,
        use_enum_values=True,
        arbitrary_types_allowed=True,
    )


# =============================================================================
# Type Aliases - Numeric
# =============================================================================

EquityPercent = Annotated[
    Decimal,
    Field(ge=0, description="Percentage of fully diluted ownership (25 = 25%)")
]

ShareCount = Annotated[
    int,
    Field(ge=0, description="Number of shares (non-negative, whole shares)")
]


# =============================================================================
# ID Conventions
# =============================================================================

EntryId = Annotated[
    str,
    Field(
        min_length=1,
        description="Opaque stable identifier assigned by the caller (e.g. a database key)"
    )
]

# Entry IDs are never interpreted. Typical values:
#   - Database UUIDs: "550e8400-e29b-41d4-a716-446655440000"
#   - Descriptive keys in tests: "founder_alice", "acme_vc"


HUNDRED = Decimal("100")
ZERO = Decimal("0")
