"""Cross-field business rules.

The structural layer (pydantic) stops evaluating a model's validators as soon as one of its
fields fails, so cross-field invariants are checked here directly on the raw mapping.
Every rule tolerates malformed input: a value of the wrong type simply does not trigger
the rule, because the structural layer already reports it."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from .constants import PRICE_PATTERN, split_price
from .issues import ValidationIssue


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _lookup(data: Mapping, alias: str, name: str) -> Any:
    """Value under the wire alias, else under the field name the models also accept."""
    if alias in data:
        return data[alias]
    return data.get(name)


def _price_amount(value: Any) -> Optional[Decimal]:
    """Amount of a well-formed price string, None for anything else."""
    if not isinstance(value, str) or not PRICE_PATTERN.match(value):
        return None
    amount, _ = split_price(value)
    try:
        return Decimal(amount)
    except InvalidOperation:
        return None


class BusinessRuleValidator:
    """Cross-field invariant checker.

    Description:
        - check_* methods return the list of issues found under the given path prefix
        - Configuration sections are dispatched to _validate_<section>_section
        - Paths use wire names so they line up with structural errors"""

    # (wire alias, field name) of each configuration section
    CONFIG_SECTIONS = (
        ("productCards", "product_cards"),
        ("surveys", "surveys"),
        ("visualizations", "visualizations"),
    )

    # ======== External interface ========

    def check_config(self, raw: Any) -> List[ValidationIssue]:
        """Run every rule of every section in a composite configuration."""
        issues: List[ValidationIssue] = []
        if not isinstance(raw, Mapping):
            return issues
        for section, name in self.CONFIG_SECTIONS:
            entries = _lookup(raw, section, name)
            if not isinstance(entries, Mapping):
                continue
            validator = getattr(self, f"_validate_{section}_section", None)
            if validator:
                validator(entries, [section], issues)
        return issues

    def check_product_card(self, raw: Any, path: Optional[List[str]] = None) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        self._validate_product_card(raw, list(path or []), issues)
        return issues

    def check_product_card_collection(self, raw: Any, path: Optional[List[str]] = None) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        if isinstance(raw, Mapping):
            self._validate_productCards_section(raw, list(path or []), issues)
        return issues

    def check_survey(self, raw: Any, path: Optional[List[str]] = None) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        self._validate_survey(raw, list(path or []), issues)
        return issues

    # ======== Sections ========

    def _validate_productCards_section(self, entries: Mapping, path: List[str], errors: List[ValidationIssue]):
        """Each card passes its own rules and card ids are unique across the collection."""
        seen: Dict[str, str] = {}
        for key, card in entries.items():
            card_path = path + [str(key)]
            self._validate_product_card(card, card_path, errors)
            card_id = card.get("id") if isinstance(card, Mapping) else None
            if not isinstance(card_id, str):
                continue
            if card_id in seen:
                errors.append(
                    ValidationIssue(
                        card_path + ["id"],
                        f'Duplicate product card id "{card_id}" (already used by "{seen[card_id]}")',
                    )
                )
            else:
                seen[card_id] = str(key)

    def _validate_surveys_section(self, entries: Mapping, path: List[str], errors: List[ValidationIssue]):
        for key, survey in entries.items():
            self._validate_survey(survey, path + [str(key)], errors)

    def _validate_visualizations_section(self, entries: Mapping, path: List[str], errors: List[ValidationIssue]):
        """Visualizations carry no cross-field rules; structure is checked by the model layer."""
        return

    # ======== Product card ========

    def _validate_product_card(self, card: Any, path: List[str], errors: List[ValidationIssue]):
        if not isinstance(card, Mapping):
            return

        if card.get("availability") == "preorder" and not card.get("availability_date"):
            errors.append(
                ValidationIssue(
                    path + ["availability_date"],
                    'availability_date is required when availability is "preorder"',
                )
            )

        if card.get("enable_checkout") is True and card.get("enable_search") is not True:
            errors.append(
                ValidationIssue(
                    path + ["enable_search"],
                    "enable_search must be true when enable_checkout is enabled",
                )
            )

        sale_amount = _price_amount(card.get("sale_price"))
        regular_amount = _price_amount(card.get("price"))
        if sale_amount is not None and regular_amount is not None and sale_amount > regular_amount:
            errors.append(
                ValidationIssue(
                    path + ["sale_price"],
                    "sale_price must be less than or equal to price",
                )
            )

    # ======== Survey ========

    def _validate_survey(self, survey: Any, path: List[str], errors: List[ValidationIssue]):
        if not isinstance(survey, Mapping):
            return

        has_fields = survey.get("fields") is not None
        has_pages = survey.get("pages") is not None
        if has_fields == has_pages:
            errors.append(
                ValidationIssue(path, 'Survey must have either "fields" or "pages", but not both')
            )

        pages = survey.get("pages")
        if not isinstance(pages, list):
            return

        seen_ids = set()
        for idx, page in enumerate(pages):
            if not isinstance(page, Mapping):
                continue
            page_path = path + ["pages", str(idx)]
            page_id = page.get("id")
            if isinstance(page_id, str):
                if page_id in seen_ids:
                    errors.append(ValidationIssue(page_path + ["id"], f'Duplicate page id "{page_id}"'))
                seen_ids.add(page_id)

            validator = getattr(self, f"_validate_{page.get('type')}_page", None)
            if validator:
                validator(page, page_path, errors)

    def _validate_textInput_page(self, page: Mapping, path: List[str], errors: List[ValidationIssue]):
        """minLength may not exceed maxLength"""
        validation = page.get("validation")
        if not isinstance(validation, Mapping):
            return
        min_length = _lookup(validation, "minLength", "min_length")
        max_length = _lookup(validation, "maxLength", "max_length")
        if _is_number(min_length) and _is_number(max_length) and min_length > max_length:
            errors.append(
                ValidationIssue(
                    path + ["validation", "minLength"],
                    "minLength must be less than or equal to maxLength",
                )
            )

    def _validate_multipleChoice_page(self, page: Mapping, path: List[str], errors: List[ValidationIssue]):
        """maxSelections must be selectable from the declared options"""
        max_selections = _lookup(page, "maxSelections", "max_selections")
        options = page.get("options")
        if not _is_number(max_selections) or not isinstance(options, list):
            return
        if max_selections < 1 or max_selections > len(options):
            errors.append(
                ValidationIssue(
                    path + ["maxSelections"],
                    f"maxSelections must be between 1 and the number of options ({len(options)})",
                )
            )

    def _validate_rating_page(self, page: Mapping, path: List[str], errors: List[ValidationIssue]):
        """The scale needs at least two distinct points"""
        low = page.get("min", 1)
        high = page.get("max", 5)
        if _is_number(low) and _is_number(high) and low >= high:
            errors.append(ValidationIssue(path + ["min"], "min must be less than max"))


__all__ = ["BusinessRuleValidator"]
