"""Share structure configuration.

The share structure fixes how percentages project onto whole shares and how
precisely percentages are kept. It is passed into every CapTable so tables
with different share structures can coexist in one process.
"""

from decimal import Decimal
from pydantic import ConfigDict, Field, model_validator

from .base import DomainModel


class ShareStructureCFG(DomainModel):
    """Configuration for the share structure behind a cap table.

    Defaults describe the conventional layout: 1,000,000 authorized shares so
    that 1% of ownership equals 10,000 shares, percentages kept to hundredths,
    and a 0.01 percentage point tolerance on the 100% invariant.

    Example:
        # Default structure
        ShareStructureCFG()

        # 10M authorized shares (1% = 100,000 shares)
        ShareStructureCFG(total_authorized_shares=10_000_000)
    """

    model_config = ConfigDict(frozen=True)

    total_authorized_shares: int = Field(
        default=1_000_000,
        gt=0,
        description="Total authorized shares, i.e. the share count of a 100% table"
    )

    tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Allowed deviation (percentage points) of the table total from 100"
    )

    precision: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places percentages are rounded to (2 = hundredths of a percent)"
    )

    @model_validator(mode='after')
    def validate_whole_shares_per_percent(self):
        """Each percent must map to a whole number of shares."""
        if self.total_authorized_shares % 100 != 0:
            raise ValueError(
                "total_authorized_shares must be a multiple of 100, "
                f"got: {self.total_authorized_shares}"
            )
        return self

    @property
    def shares_per_percent(self) -> int:
        """Shares represented by one percentage point (10,000 by default)."""
        return self.total_authorized_shares // 100

    @property
    def quantum(self) -> Decimal:
        """Smallest representable percentage step (Decimal("0.01") by default)."""
        return Decimal(10) ** -self.precision
