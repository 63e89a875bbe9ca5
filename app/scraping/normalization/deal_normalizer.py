"""
Map loosely-typed source rows onto the canonical Deal record.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.nadlan import Deal, RawRow, ScrapeRequest
from app.scraping.normalization.values import clean_text, parse_date, parse_int, parse_number

UNKNOWN_VALUE = "לא ידוע"

# Hebrew table headers first, then keys seen in the intercepted JSON items.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "serial_no": ("מספר סידורי", "serialNo", "serial"),
    "address": ("כתובת", "address", "fullAddress"),
    "area_m2": ('שטח במ"ר', "שטח", "assetArea", "area"),
    "deal_date": ("תאריך העסקה", "dealDate", "dealDateTime"),
    "price_nis": ("מחיר העסקה", "dealAmount", "price"),
    "block_parcel_subparcel": ("גוש/חלקה/תת-חלקה", "gushHelka", "blockParcel"),
    "property_type": ("סוג נכס", "dealNature", "assetType", "propertyType"),
    "rooms": ("חדרים", "roomNum", "rooms"),
    "floor": ("קומה", "floor", "floorNo"),
    "trend": ("מגמת שינוי", "trend"),
}

_DEDUPE_FIELDS = (
    "city_name",
    "address",
    "deal_date",
    "price_nis",
    "area_m2",
    "block_parcel_subparcel",
    "property_type",
    "rooms",
    "floor",
)


def lookup(row: Mapping[str, Any], field_name: str) -> Any:
    """
    Return the first non-empty value among the aliases of a canonical field.
    """

    for key in FIELD_ALIASES[field_name]:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def build_dedupe_key(identity: Mapping[str, Any]) -> str:
    payload = json.dumps(identity, ensure_ascii=False, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class DealNormalizer:
    """
    Convert RawRows (header-keyed, positional or API items) into Deals.
    """

    def normalize_rows(
        self,
        rows: Sequence[RawRow],
        *,
        request: ScrapeRequest,
        source_url: str | None,
    ) -> list[Deal]:
        return [
            self.normalize_row(
                row,
                request=request,
                serial_fallback=index,
                source_url=source_url,
            )
            for index, row in enumerate(rows, start=1)
        ]

    def normalize_row(
        self,
        row: RawRow,
        *,
        request: ScrapeRequest,
        serial_fallback: int,
        source_url: str | None,
    ) -> Deal:
        if request.street and request.house_number:
            address = f"{request.street} {request.house_number}"
        else:
            address = clean_text(lookup(row, "address"))

        raw_area = lookup(row, "area_m2")
        area_m2 = None if clean_text(raw_area) == UNKNOWN_VALUE else parse_number(raw_area)

        serial_no = parse_int(lookup(row, "serial_no"))
        values: dict[str, Any] = {
            "city_name": request.city_name,
            "serial_no": serial_no if serial_no is not None else serial_fallback,
            "address": address,
            "area_m2": area_m2,
            "deal_date": parse_date(lookup(row, "deal_date")),
            "price_nis": parse_number(lookup(row, "price_nis")),
            "block_parcel_subparcel": clean_text(lookup(row, "block_parcel_subparcel")),
            "property_type": clean_text(lookup(row, "property_type")),
            "rooms": parse_number(lookup(row, "rooms")),
            "floor": clean_text(lookup(row, "floor")),
            "trend": clean_text(lookup(row, "trend")),
            "source_url": source_url,
        }
        identity = {name: values[name] for name in _DEDUPE_FIELDS}
        if all(identity[name] is None for name in _DEDUPE_FIELDS[2:]):
            # Positional rows parse to nothing but city and address.
            identity["raw"] = row
        return Deal(**values, raw=dict(row), dedupe_key=build_dedupe_key(identity))
