"""Pydantic data models for portfolio snapshots supplied to the risk engine."""

from typing import Dict, List, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic.alias_generators import to_camel


ASSET_CLASSES = ('residential', 'commercial', 'industrial', 'land', 'reits', 'other')


class PropertyType(str, Enum):
    """Enumeration for property asset classes."""
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    LAND = "land"
    REITS = "reits"
    OTHER = "other"


class LiquidityTier(str, Enum):
    """Enumeration for how quickly a holding converts to cash."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PortfolioModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(
        validate_assignment=True,
        allow_inf_nan=False,
        alias_generator=to_camel,
        populate_by_name=True
    )


class PropertyMetadata(PortfolioModel):
    """Structural attributes of a property used for risk scoring."""

    property_type: PropertyType = Field(PropertyType.RESIDENTIAL, description="Asset class of the property")
    units: Optional[int] = Field(None, ge=0, description="Number of rentable units")
    age: Optional[float] = Field(None, ge=0, description="Building age in years")
    loan_amount: Optional[float] = Field(None, ge=0, description="Outstanding loan balance")
    liquidity_tier: LiquidityTier = Field(LiquidityTier.LOW, description="Liquidity classification")

    @field_validator('property_type', 'liquidity_tier', mode='before')
    @classmethod
    def normalize_enum_text(cls, v):
        """Accept enum values in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class PortfolioProperty(PortfolioModel):
    """A single property holding in a portfolio."""

    property_id: str = Field(..., description="Property identifier")
    current_value: float = Field(..., ge=0, description="Current market value of the holding")
    monthly_rent: Optional[float] = Field(None, ge=0, description="Monthly rental income")
    total_return_percentage: float = Field(0.0, description="Annualized total return in percent")
    property_metadata: PropertyMetadata = Field(default_factory=PropertyMetadata)

    @field_validator('property_id')
    @classmethod
    def validate_property_id(cls, v):
        """Validate property identifier."""
        if not v or not v.strip():
            raise ValueError("Property id cannot be empty")
        return v.strip()

    @property
    def loan_to_value(self) -> float:
        """Loan-to-value ratio, 0 when there is no loan or no value."""
        loan_amount = self.property_metadata.loan_amount
        if not loan_amount or self.current_value <= 0:
            return 0.0
        return loan_amount / self.current_value


class PortfolioAllocation(PortfolioModel):
    """Fractional weights across the six asset classes."""

    residential: float = Field(0.0, ge=0, le=1)
    commercial: float = Field(0.0, ge=0, le=1)
    industrial: float = Field(0.0, ge=0, le=1)
    land: float = Field(0.0, ge=0, le=1)
    reits: float = Field(0.0, ge=0, le=1)
    other: float = Field(0.0, ge=0, le=1)

    def weights(self) -> Dict[str, float]:
        """Return weights keyed by asset class, in canonical order."""
        return {asset_class: getattr(self, asset_class) for asset_class in ASSET_CLASSES}

    def total(self) -> float:
        """Sum of all weights."""
        return sum(self.weights().values())

    def drift_from(self, target: 'PortfolioAllocation') -> Dict[str, float]:
        """Absolute weight difference per asset class against a target."""
        target_weights = target.weights()
        return {
            asset_class: abs(weight - target_weights[asset_class])
            for asset_class, weight in self.weights().items()
        }


class Portfolio(PortfolioModel):
    """Read-only portfolio snapshot supplied by the portfolio manager."""

    id: str = Field(..., description="Portfolio identifier")
    name: Optional[str] = Field(None, description="Display name")
    total_value: float = Field(..., description="Sum of all holding values")
    properties: List[PortfolioProperty] = Field(default_factory=list)
    current_allocation: PortfolioAllocation = Field(..., description="Current allocation weights")
    target_allocation: Optional[PortfolioAllocation] = Field(None, description="Target allocation weights")

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        """Validate portfolio identifier."""
        if not v or not v.strip():
            raise ValueError("Portfolio id cannot be empty")
        return v.strip()

    @property
    def holdings_value(self) -> float:
        """Sum of current values across all properties."""
        return sum(p.current_value for p in self.properties)

    def property_weights(self) -> Dict[str, float]:
        """Holding weights relative to total_value, keyed by property id."""
        if self.total_value <= 0:
            return {}
        weights: Dict[str, float] = {}
        for p in self.properties:
            weights[p.property_id] = weights.get(p.property_id, 0.0) + p.current_value / self.total_value
        return weights
