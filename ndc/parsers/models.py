"""Result models returned by the response parsers.

Every result carries ``success``, ``errors``, and ``warnings``. A response
that reports errors but still contains usable data is successful; its
errors are repeated in ``warnings``.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ndc.models import Amount, AssociationType, NDCErrorItem, OrderStatus, ServiceCategory


class ParseResult(BaseModel):
    """Outcome fields shared by every parser."""

    success: bool = True
    errors: list[NDCErrorItem] = Field(default_factory=list)
    warnings: list[NDCErrorItem] = Field(default_factory=list)


# --- Generic ---


class BookingReference(BaseModel):
    booking_id: str
    carrier: Optional[str] = None
    type_code: Optional[str] = None


class GenericResult(ParseResult):
    response_id: Optional[str] = None
    order_id: Optional[str] = None
    owner_code: Optional[str] = None
    booking_references: list[BookingReference] = Field(default_factory=list)


# --- Service List ---


class ServiceDefinition(BaseModel):
    """Catalogue entry describing an ancillary."""

    service_id: str
    service_code: str = ""
    name: str = ""
    description: Optional[str] = None
    rfic: Optional[str] = None
    rfisc: Optional[str] = None
    category: ServiceCategory = ServiceCategory.OTHER
    included_service_ids: list[str] = Field(default_factory=list)


class AncillaryOffer(BaseModel):
    """One purchasable ancillary, after bundle grouping."""

    offer_id: str
    offer_item_id: str
    owner_code: str = "JQ"
    service_id: Optional[str] = None
    service_code: str = ""
    service_name: str = ""
    category: ServiceCategory = ServiceCategory.OTHER
    price: Amount = Field(default_factory=Amount)
    pax_ref_ids: list[str] = Field(default_factory=list)
    association_type: AssociationType = AssociationType.UNKNOWN
    segment_ref_ids: list[str] = Field(default_factory=list)
    journey_ref_ids: list[str] = Field(default_factory=list)
    leg_ref_ids: list[str] = Field(default_factory=list)
    included_service_ids: list[str] = Field(default_factory=list)

    @property
    def is_bundle(self) -> bool:
        return self.category == ServiceCategory.BUNDLE


class ListedSegment(BaseModel):
    segment_id: str
    origin: Optional[str] = None
    destination: Optional[str] = None
    departure: Optional[str] = None
    arrival: Optional[str] = None
    carrier: Optional[str] = None
    flight_number: Optional[str] = None
    marketing_segment_id: Optional[str] = None


class ListedJourney(BaseModel):
    journey_id: str
    segment_ref_ids: list[str] = Field(default_factory=list)


class ServiceListResult(ParseResult):
    response_id: Optional[str] = None
    services: list[ServiceDefinition] = Field(default_factory=list)
    ancillary_offers: list[AncillaryOffer] = Field(default_factory=list)
    segments: list[ListedSegment] = Field(default_factory=list)
    journeys: list[ListedJourney] = Field(default_factory=list)

    def offers_by_category(self, category: ServiceCategory) -> list[AncillaryOffer]:
        return [o for o in self.ancillary_offers if o.category == category]


# --- Seat Availability ---


class SeatOfferItem(BaseModel):
    """Priced seat product from the response's ALaCarteOffer."""

    offer_item_id: str
    price: Amount = Field(default_factory=Amount)
    pax_ref_ids: list[str] = Field(default_factory=list)
    pax_types: list[str] = Field(default_factory=list)


class Seat(BaseModel):
    row_number: str
    column_id: str
    occupation_status: str = "O"
    characteristics: list[str] = Field(default_factory=list)
    offer_item_ids_by_pax_type: dict[str, str] = Field(default_factory=dict)
    price: Optional[Amount] = None

    @property
    def seat_id(self) -> str:
        return f"{self.row_number}{self.column_id}"

    @property
    def available(self) -> bool:
        return self.occupation_status == "F"


class SeatRow(BaseModel):
    row_number: str
    seats: list[Seat] = Field(default_factory=list)


class CabinCompartment(BaseModel):
    cabin_type_code: str = "M"
    first_row: str = "1"
    last_row: str = "30"
    column_layout: str = "ABC DEF"
    rows: list[SeatRow] = Field(default_factory=list)


class SeatMap(BaseModel):
    segment_ref_id: str
    cabins: list[CabinCompartment] = Field(default_factory=list)

    @property
    def seats(self) -> list[Seat]:
        return [seat for cabin in self.cabins for row in cabin.rows for seat in row.seats]


class SeatAvailabilityResult(ParseResult):
    response_id: Optional[str] = None
    a_la_carte_offer_id: Optional[str] = None
    owner_code: Optional[str] = None
    offer_items: dict[str, SeatOfferItem] = Field(default_factory=dict)
    seat_maps: list[SeatMap] = Field(default_factory=list)


# --- Offer Price ---


class TaxFeeItem(BaseModel):
    code: str
    name: str
    amount: float = 0.0
    currency: str = "AUD"
    kind: str = "tax"  # tax | fee


class PricedOfferItem(BaseModel):
    offer_item_id: str
    pax_ref_ids: list[str] = Field(default_factory=list)
    base_amount: Optional[Amount] = None
    discounted_base_amount: Optional[Amount] = None
    surcharge_amount: float = 0.0
    adjustment_amount: float = 0.0
    tax_amount: Optional[Amount] = None
    total_amount: Optional[Amount] = None
    fare_basis_code: Optional[str] = None
    flight_ref_ids: list[str] = Field(default_factory=list)
    tax_items: list[TaxFeeItem] = Field(default_factory=list)

    @property
    def is_fare_item(self) -> bool:
        """Flight fare, as opposed to a bundle or service line."""
        return bool(self.fare_basis_code) and self.base_amount is not None and self.base_amount.value > 0


class PricedOffer(BaseModel):
    offer_id: str
    owner_code: str = "JQ"
    total_price: Optional[Amount] = None
    offer_items: list[PricedOfferItem] = Field(default_factory=list)


class PassengerPriceBreakdown(BaseModel):
    """Per-passenger-type totals for one flight."""

    ptc: str
    pax_count: int = 1
    base_fare: float = 0.0
    discounted_base_fare: float = 0.0
    surcharges: float = 0.0
    adjustments: float = 0.0
    taxes: list[TaxFeeItem] = Field(default_factory=list)
    fees: list[TaxFeeItem] = Field(default_factory=list)
    total_taxes_fees: float = 0.0
    total: float = 0.0

    @property
    def published_fare(self) -> float:
        return round(self.discounted_base_fare + self.surcharges + self.adjustments, 2)


class FlightPriceBreakdown(BaseModel):
    flight_number: int
    route: str
    segment_ids: list[str] = Field(default_factory=list)
    currency: str = "AUD"
    base_fare: float = 0.0
    discounted_base_fare: float = 0.0
    surcharges: float = 0.0
    adjustments: float = 0.0
    fees_and_taxes: list[TaxFeeItem] = Field(default_factory=list)
    total_fees_and_taxes: float = 0.0
    flight_total: float = 0.0
    passenger_breakdown: list[PassengerPriceBreakdown] = Field(default_factory=list)

    @property
    def published_fare(self) -> float:
        return round(self.discounted_base_fare + self.surcharges + self.adjustments, 2)


class OfferPriceResult(ParseResult):
    response_id: Optional[str] = None
    priced_offers: list[PricedOffer] = Field(default_factory=list)
    flight_breakdowns: list[FlightPriceBreakdown] = Field(default_factory=list)
    expiration_datetime: Optional[str] = None

    @property
    def currency(self) -> str:
        for offer in self.priced_offers:
            if offer.total_price is not None:
                return offer.total_price.currency
        return self.flight_breakdowns[0].currency if self.flight_breakdowns else "AUD"

    @property
    def fare_total(self) -> float:
        """Flight fares only, bundles and services excluded."""
        return round(sum(f.flight_total for f in self.flight_breakdowns), 2)

    @property
    def bundle_total(self) -> float:
        """Bundle and service lines priced alongside the fares."""
        return round(
            sum(
                item.total_amount.value
                for offer in self.priced_offers
                for item in offer.offer_items
                if not item.is_fare_item and item.total_amount is not None
            ),
            2,
        )


# --- Order ---


class OrderPassenger(BaseModel):
    pax_id: str
    ptc: str = "ADT"
    given_name: Optional[str] = None
    surname: Optional[str] = None
    birthdate: Optional[str] = None


class SeatAssignment(BaseModel):
    row: str
    column: str
    segment_ref_id: Optional[str] = None


class OrderServiceItem(BaseModel):
    order_item_id: str
    service_id: Optional[str] = None
    service_definition_ref_id: Optional[str] = None
    service_code: str = ""
    service_name: str = ""
    category: ServiceCategory = ServiceCategory.OTHER
    pax_ref_ids: list[str] = Field(default_factory=list)
    segment_ref_ids: list[str] = Field(default_factory=list)
    journey_ref_ids: list[str] = Field(default_factory=list)
    seat: Optional[SeatAssignment] = None


class OrderItem(BaseModel):
    order_item_id: str
    status_code: Optional[str] = None
    total_amount: Optional[Amount] = None
    pax_ref_ids: list[str] = Field(default_factory=list)
    service_ids: list[str] = Field(default_factory=list)


class PaymentInfo(BaseModel):
    payment_id: Optional[str] = None
    status: Optional[str] = None
    amount: Optional[Amount] = None
    surcharge: Optional[Amount] = None
    method_type: Optional[str] = None
    card_brand: Optional[str] = None
    masked_card_number: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return (self.status or "").upper() in ("SUCCESSFUL", "SUCCESS", "COMPLETED", "PAID", "OK")


class ParsedOrder(BaseModel):
    order_id: str
    owner_code: str = "JQ"
    status: OrderStatus = OrderStatus.CONFIRMED
    raw_status: Optional[str] = None
    creation_datetime: Optional[str] = None
    payment_time_limit: Optional[str] = None
    total_price: Optional[Amount] = None
    booking_references: list[BookingReference] = Field(default_factory=list)
    order_items: list[OrderItem] = Field(default_factory=list)
    passengers: list[OrderPassenger] = Field(default_factory=list)
    journeys: list[ListedJourney] = Field(default_factory=list)
    segments: list[ListedSegment] = Field(default_factory=list)
    service_items: list[OrderServiceItem] = Field(default_factory=list)
    payments: list[PaymentInfo] = Field(default_factory=list)

    @property
    def pnr(self) -> Optional[str]:
        return self.booking_references[0].booking_id if self.booking_references else None


class OrderResult(ParseResult):
    response_id: Optional[str] = None
    order: Optional[ParsedOrder] = None
