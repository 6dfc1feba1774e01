"""Sample patients and rule sets shared by the unit tests."""

from dataclasses import dataclass, field

from pydantic import BaseModel

from validoctor import MultiRule, bind, combine, each
from validoctor.catalog import (
    at_most_one_set,
    is_null,
    not_null,
    number_in_range,
    positive,
    string_max_length,
    string_not_empty,
)


@dataclass
class NutritionFacts:
    calories: int | None = None
    allergens: list[str] = field(default_factory=list)


@dataclass
class Variant:
    sku: str | None = None
    price: float | None = None


@dataclass
class Manufacturer:
    name: str = "Acme"
    country: str | None = None


@dataclass
class Product:
    name: str = "Granola"
    sku_id: str | None = None
    nutrition_facts: NutritionFacts | None = None
    review_scores: list[int] = field(default_factory=list)
    variants: list[Variant] = field(default_factory=list)
    manufacturer: Manufacturer | None = None
    discount_percent: float | None = None
    discount_amount: float | None = None
    coupon_code: str | None = None


class Warehouse(BaseModel):
    code: str
    capacity: int = 0


@dataclass
class Category:
    name: str
    children: list["Category"] = field(default_factory=list)
    parent: "Category | None" = None


NULLITY_RULES = MultiRule.of(
    "product-nullity",
    bind("nutrition_facts", not_null(), when=lambda p: p.sku_id is not None),
    bind("nutrition_facts", is_null(), when=lambda p: p.sku_id is None),
    declared_type=Product,
)

VALIDITY_RULES = MultiRule.of(
    "product-validity",
    bind("name", string_not_empty()),
    declared_type=Product,
)

VARIANT_RULES = MultiRule.of(
    "variant",
    bind("sku", not_null()),
    bind("sku", string_max_length(8)),
    bind("price", positive()),
    declared_type=Variant,
)

MANUFACTURER_RULES = MultiRule.of(
    "manufacturer",
    bind("name", string_not_empty()),
    bind("country", not_null()),
    declared_type=Manufacturer,
)

PRODUCT_RULES = MultiRule.of(
    "product",
    bind("name", string_not_empty()),
    bind("review_scores", each(number_in_range(1, 5))),
    bind("variants", each(VARIANT_RULES)),
    bind("manufacturer", MANUFACTURER_RULES),
    combine(at_most_one_set("discount_percent", "discount_amount", "coupon_code")),
    declared_type=Product,
)

CATEGORY_RULES = MultiRule.recursive(
    "category",
    lambda rule: [
        bind("name", string_not_empty()),
        bind("children", each(rule)),
    ],
    declared_type=Category,
)

# Rules for JSON payloads, read as mappings
PAYLOAD_RULES = MultiRule.of(
    "payload",
    bind("name", string_not_empty()),
    bind("reviewScores", each(number_in_range(1, 5))),
)

MISSING_FIELD_RULES = MultiRule.of(
    "payload-missing",
    bind("doesNotExist", not_null()),
)

NOT_A_CHECK = "not a check"
