"""Request models accepted by the message builders."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ndc.identifiers import normalize_segment_id
from ndc.models import (
    Amount,
    AssociationType,
    Contact,
    Journey,
    Passenger,
    PaymentType,
    Segment,
)


# --- Shared ---


class OfferItemRef(BaseModel):
    """A previously obtained offer item, optionally with its service."""

    offer_item_id: str = Field(min_length=1)
    service_id: Optional[str] = None


class PassengerCounts(BaseModel):
    adults: int = Field(default=1, ge=0)
    children: int = Field(default=0, ge=0)
    infants: int = Field(default=0, ge=0)

    def pax_ids(self) -> list[str]:
        """Positional ids used when no passenger list is known."""
        ids = [f"ADT{n}" for n in range(self.adults)]
        ids += [f"CHD{n}" for n in range(self.children)]
        ids += [f"INF{n}" for n in range(self.infants)]
        return ids


# --- Service List ---


class ServiceListOffer(BaseModel):
    offer_id: str = Field(min_length=1)
    owner_code: Optional[str] = None
    offer_items: list[OfferItemRef] = Field(min_length=1)


class ServiceListRequest(BaseModel):
    """Ancillary catalogue request for previously shopped offers."""

    offers: list[ServiceListOffer] = Field(min_length=1)


# --- Seat Availability ---


class SeatAvailabilityOffer(BaseModel):
    offer_id: str = Field(min_length=1)
    owner_code: Optional[str] = None
    offer_item_ids: list[str] = Field(min_length=1)


class SeatAvailabilityRequest(BaseModel):
    """Seat map request.

    Either ``offers`` (one entry per previously obtained offer) or the
    single-offer form (``offer_id``, ``offer_item_ids``, ``segment_ref_ids``).
    The airline rejects a shopping response id here, so unknown fields
    are refused.
    """

    model_config = {"extra": "forbid"}

    offers: list[SeatAvailabilityOffer] = Field(default_factory=list)
    offer_id: Optional[str] = None
    owner_code: Optional[str] = None
    offer_item_ids: list[str] = Field(default_factory=list)
    segment_ref_ids: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def one_shape(self) -> "SeatAvailabilityRequest":
        if self.offers and self.offer_id:
            raise ValueError("give either offers or offer_id, not both")
        if not self.offers and not self.offer_id:
            raise ValueError("at least one offer is required")
        if self.offer_id and not self.offer_item_ids:
            raise ValueError("offer_item_ids is required with offer_id")
        return self


# --- Long Sell ---


class LongSellBundle(BaseModel):
    """Bundle applied to every passenger (except infants) on one journey."""

    bundle_code: str = Field(min_length=1)
    journey_index: int = Field(default=0, ge=0)
    pax_ids: list[str] = Field(min_length=1)


class LongSellSSR(BaseModel):
    ssr_code: str = Field(min_length=1)
    segment_index: int = Field(default=0, ge=0)
    pax_id: str = Field(min_length=1)


class LongSellSeat(BaseModel):
    segment_index: int = Field(default=0, ge=0)
    pax_id: str = Field(min_length=1)
    row: str
    column: str = Field(min_length=1, max_length=1)

    @field_validator("row", mode="before")
    @classmethod
    def row_as_text(cls, v) -> str:
        return str(v) if isinstance(v, int) else v

    @field_validator("column", mode="before")
    @classmethod
    def uppercase_column(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class LongSellRequest(BaseModel):
    """Flight-level pricing request that carries the whole itinerary."""

    segments: list[Segment] = Field(min_length=1)
    journeys: list[Journey] = Field(min_length=1)
    passengers: list[Passenger] = Field(min_length=1)
    card_brand: str = Field(default="VI", min_length=2)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    bundles: list[LongSellBundle] = Field(default_factory=list)
    ssrs: list[LongSellSSR] = Field(default_factory=list)
    seats: list[LongSellSeat] = Field(default_factory=list)

    @model_validator(mode="after")
    def journeys_match_segments(self) -> "LongSellRequest":
        by_clean = {normalize_segment_id(s.segment_id).clean: s for s in self.segments if s.segment_id}
        for journey in self.journeys:
            resolved = [by_clean.get(normalize_segment_id(sid).clean) for sid in journey.segment_ids]
            if any(s is None for s in resolved):
                raise ValueError(f"journey {journey.journey_id or '?'} references an unknown segment")
            if journey.origin != resolved[0].origin or journey.destination != resolved[-1].destination:
                raise ValueError(
                    f"journey {journey.journey_id or '?'} endpoints {journey.origin}-{journey.destination} "
                    f"do not match its segments {resolved[0].origin}-{resolved[-1].destination}"
                )
        return self


# --- Offer Price ---


class PriceOfferItem(BaseModel):
    """An offer item selected for repricing."""

    offer_item_id: str = Field(min_length=1)
    pax_ref_ids: list[str] = Field(default_factory=list)
    a_la_carte: bool = False
    association_type: AssociationType = AssociationType.UNKNOWN
    segment_ref_ids: list[str] = Field(default_factory=list)
    journey_ref_ids: list[str] = Field(default_factory=list)
    leg_ref_ids: list[str] = Field(default_factory=list)
    seat_row: Optional[str] = None
    seat_column: Optional[str] = None

    @field_validator("seat_row", mode="before")
    @classmethod
    def row_as_text(cls, v) -> Optional[str]:
        return str(v) if isinstance(v, int) else v


class PriceOffer(BaseModel):
    offer_id: str = Field(min_length=1)
    owner_code: Optional[str] = None
    offer_items: list[PriceOfferItem] = Field(min_length=1)
    pax_ref_ids: list[str] = Field(default_factory=list)


class OfferPriceRequest(BaseModel):
    """Reprice a selection of flight and à-la-carte offer items."""

    offers: list[PriceOffer] = Field(min_length=1)
    passenger_counts: Optional[PassengerCounts] = None
    card_brand: Optional[str] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


# --- Order Create ---


class SelectedOfferItem(BaseModel):
    offer_item_id: str = Field(min_length=1)
    pax_ref_ids: list[str] = Field(min_length=1)


class SelectedOffer(BaseModel):
    offer_id: str = Field(min_length=1)
    owner_code: Optional[str] = None
    offer_items: list[SelectedOfferItem] = Field(min_length=1)


class PassiveSegment(BaseModel):
    """Flown segment repeated back to the airline in OrderCreate."""

    segment_id: str = Field(min_length=1)
    journey_id: Optional[str] = None
    origin: str = Field(min_length=3, max_length=3)
    destination: str = Field(min_length=3, max_length=3)
    departure: datetime
    arrival: datetime
    flight_number: str
    marketing_carrier: Optional[str] = None
    operating_carrier: Optional[str] = None
    rbd: Optional[str] = None

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def uppercase_airports(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @field_validator("flight_number", mode="before")
    @classmethod
    def flight_number_as_text(cls, v) -> str:
        return str(v) if isinstance(v, int) else v


class PaymentCard(BaseModel):
    brand: str = Field(min_length=2)
    number: str = Field(min_length=12)
    holder_name: Optional[str] = None
    expiry: str = Field(pattern=r"^\d{4}$", description="MMYY")
    security_code: Optional[str] = None


class Payment(BaseModel):
    type: PaymentType = PaymentType.AGT
    amount: Amount
    card: Optional[PaymentCard] = None

    @model_validator(mode="after")
    def card_for_cc(self) -> "Payment":
        if self.type == PaymentType.CC and self.card is None:
            raise ValueError("card details are required for CC payments")
        return self


class OrderCreateRequest(BaseModel):
    """Commit a priced offer into an order."""

    offers: list[SelectedOffer] = Field(min_length=1)
    passengers: list[Passenger] = Field(min_length=1)
    contact: Contact
    passive_segments: list[PassiveSegment] = Field(default_factory=list)
    payment: Optional[Payment] = None

    @model_validator(mode="after")
    def passengers_complete(self) -> "OrderCreateRequest":
        declared = {p.pax_id: p for p in self.passengers}
        for pax in self.passengers:
            if not pax.given_name or not pax.surname or pax.birthdate is None:
                raise ValueError(f"{pax.pax_id}: given_name, surname and birthdate are required")
            if pax.accompanying_pax_id:
                adult = declared.get(pax.accompanying_pax_id)
                if adult is None or adult.ptc.value != "ADT":
                    raise ValueError(
                        f"{pax.pax_id}: accompanying passenger {pax.accompanying_pax_id} must be a declared adult"
                    )
        return self


# --- Order Retrieve ---


class OrderRetrieveRequest(BaseModel):
    order_id: str = Field(min_length=1)
    owner_code: Optional[str] = Field(default=None, min_length=2, max_length=2)


# --- Order Change (payment) ---


class Payer(BaseModel):
    given_name: Optional[str] = None
    surname: Optional[str] = None
    email: Optional[str] = None


class AgencyAccount(BaseModel):
    iata_number: Optional[str] = None
    account_number: Optional[str] = None


class OrderChangePaymentRequest(BaseModel):
    """Pay for an existing, unpaid order."""

    model_config = {"extra": "forbid"}

    order_id: str = Field(min_length=1)
    owner_code: Optional[str] = Field(default=None, min_length=2, max_length=2)
    payment: Payment
    payer: Optional[Payer] = None
    agency: Optional[AgencyAccount] = None
