"""Domain models for the NDC correlation layer.

Pydantic models for flights, passengers, distribution chains, and the
value objects shared by message builders, response parsers, and price
reconciliation.
"""

from datetime import date as Date
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# --- Enums ---


class PaxType(str, Enum):
    """Passenger type codes (PTC)."""

    ADT = "ADT"
    CHD = "CHD"
    INF = "INF"


PAX_TYPE_ORDER: dict[str, int] = {"ADT": 0, "CHD": 1, "INF": 2}


class OrgRole(str, Enum):
    """Participating organisation roles in a distribution chain."""

    SELLER = "Seller"
    DISTRIBUTOR = "Distributor"
    CARRIER = "Carrier"


class AssociationType(str, Enum):
    """Which flight scope an ancillary offer item applies to."""

    SEGMENT = "segment"
    JOURNEY = "journey"
    LEG = "leg"
    UNKNOWN = "unknown"


class ServiceCategory(str, Enum):
    """Ancillary service categories."""

    BAGGAGE = "BAGGAGE"
    SEAT = "SEAT"
    MEAL = "MEAL"
    BUNDLE = "BUNDLE"
    SSR = "SSR"
    LOUNGE = "LOUNGE"
    INSURANCE = "INSURANCE"
    OTHER = "OTHER"


class OrderStatus(str, Enum):
    """Normalised order lifecycle states."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    TICKETED = "TICKETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"
    OPENED = "OPENED"


class PaymentType(str, Enum):
    """Payment method type codes."""

    CC = "CC"  # Credit card
    AGT = "AGT"  # Agency account
    CA = "CA"  # Cash


# --- Shared Value Objects ---


class Amount(BaseModel):
    """A monetary amount with currency."""

    value: float = 0.0
    currency: str = "AUD"

    @field_validator("currency", mode="before")
    @classmethod
    def uppercase_currency(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class NDCErrorItem(BaseModel):
    """A business error or warning reported inside an NDC response."""

    code: str = "UNKNOWN"
    message: str = "Unknown error"


# --- Flight Models ---


class Segment(BaseModel):
    """A single marketed flight segment."""

    segment_id: str = ""
    origin: str = Field(min_length=3, max_length=3, description="3-letter IATA airport code")
    destination: str = Field(min_length=3, max_length=3)
    departure: datetime
    arrival: Optional[datetime] = None
    marketing_carrier: str = Field(default="JQ", min_length=2, max_length=2)
    operating_carrier: Optional[str] = Field(default=None, min_length=2, max_length=2)
    flight_number: str
    cabin_code: Optional[str] = None
    rbd: Optional[str] = None
    fare_basis: Optional[str] = None

    @field_validator("origin", "destination", "marketing_carrier", "operating_carrier", mode="before")
    @classmethod
    def uppercase_codes(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if isinstance(v, str) else v

    @field_validator("flight_number", mode="before")
    @classmethod
    def flight_number_as_text(cls, v) -> str:
        return str(v) if isinstance(v, int) else v


class Journey(BaseModel):
    """An origin-destination grouping of one or more segments."""

    journey_id: str = ""
    segment_ids: list[str] = Field(min_length=1)
    origin: str = Field(min_length=3, max_length=3)
    destination: str = Field(min_length=3, max_length=3)

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def uppercase_airports(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def from_segments(cls, journey_id: str, segments: list[Segment]) -> "Journey":
        """Build a journey whose endpoints come from its first and last segment."""
        if not segments:
            raise ValueError("a journey needs at least one segment")
        return cls(
            journey_id=journey_id,
            segment_ids=[s.segment_id for s in segments],
            origin=segments[0].origin,
            destination=segments[-1].destination,
        )


# --- Passenger Models ---


class IdentityDoc(BaseModel):
    """Travel document presented by a passenger."""

    doc_type: str = "PP"
    number: str = Field(min_length=1)
    issuing_country: str = Field(min_length=2, max_length=2)
    nationality: Optional[str] = Field(default=None, min_length=2, max_length=2)
    expiry_date: Optional[Date] = None

    @field_validator("issuing_country", "nationality", "doc_type", mode="before")
    @classmethod
    def uppercase_codes(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if isinstance(v, str) else v


class LoyaltyAccount(BaseModel):
    """Frequent flyer account."""

    account_number: str = Field(min_length=1)
    program_owner: str = Field(min_length=2, max_length=2)

    @field_validator("program_owner", mode="before")
    @classmethod
    def uppercase_owner(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class Passenger(BaseModel):
    """A traveller declared in a message."""

    pax_id: str = Field(min_length=1)
    ptc: PaxType = PaxType.ADT
    given_name: Optional[str] = None
    surname: Optional[str] = None
    birthdate: Optional[Date] = None
    gender: Optional[str] = None
    identity_doc: Optional[IdentityDoc] = None
    loyalty: Optional[LoyaltyAccount] = None
    accompanying_pax_id: Optional[str] = None

    @model_validator(mode="after")
    def infant_association_only(self) -> "Passenger":
        if self.accompanying_pax_id and self.ptc != PaxType.INF:
            raise ValueError(f"{self.pax_id}: only infants travel with an accompanying passenger")
        return self


class Phone(BaseModel):
    country_code: Optional[str] = None
    number: str = Field(min_length=1)


class PostalAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country_code: Optional[str] = Field(default=None, min_length=2, max_length=2)


class Contact(BaseModel):
    """Booking contact, referenced from every passenger."""

    email: str = Field(min_length=3)
    phone: Optional[Phone] = None
    address: Optional[PostalAddress] = None


# --- Distribution Chain ---


class DistributionChainLink(BaseModel):
    """One participating organisation in the sales channel."""

    model_config = {"frozen": True}

    ordinal: int = Field(ge=1)
    org_role: OrgRole
    org_id: str = Field(min_length=1)
    org_name: Optional[str] = None


class PartyConfig(BaseModel):
    """Sender identity and protocol defaults stamped on every request.

    Links are kept in caller order; ordering rules are checked when a
    chain is rendered so that misconfiguration surfaces as a build error.
    """

    model_config = {"frozen": True}

    links: tuple[DistributionChainLink, ...] = ()
    owner_code: str = Field(default="JQ", min_length=2, max_length=2)
    currency: str = Field(default="AUD", min_length=3, max_length=3)
    cabin_type_code: str = "5"

    @field_validator("owner_code", "currency", mode="before")
    @classmethod
    def uppercase_codes(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v
