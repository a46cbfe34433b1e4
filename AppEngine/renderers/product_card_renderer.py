"""Product card renderer.

Three layouts over the same data:
- card: full card with image, badges, rating, price block, Features/Specifications tabs and CTA
- list: horizontal row with a longer description
- compact: single line with thumbnail, title and price

The output contains no script at all: tabs are CSS-only (radio inputs) and the CTA is a link."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence, Tuple

from loguru import logger

from ..core.context import RenderContext
from ..core.packager import PackagedResource
from ..schema.constants import DISPLAY_MODES, split_price
from ..schema.models import AppConfig, ProductCard
from .base_renderer import BaseResourceRenderer, ResourceNotFoundError, escape_html, render_document

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}

CARD_DESCRIPTION_LIMIT = 100
LIST_DESCRIPTION_LIMIT = 200
GRID_ID_SEPARATOR = "+"


def format_price(amount: str, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{amount}"
    return f"{currency} {amount}"


def discount_percentage(price: str, sale_price: Optional[str]) -> Optional[int]:
    """Whole-number discount, or None unless the sale amount is strictly below the regular one."""
    if not sale_price:
        return None
    try:
        original = Decimal(split_price(price)[0])
        sale = Decimal(split_price(sale_price)[0])
    except InvalidOperation:
        return None
    if original <= 0 or sale >= original:
        return None
    percent = (original - sale) * 100 / original
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def rating_stars(rating: float) -> str:
    full = int(math.floor(rating))
    half = (rating - full) >= 0.5
    empty = 5 - full - (1 if half else 0)
    return "★" * full + ("⯨" if half else "") + "☆" * max(empty, 0)


class ProductCardRenderer(BaseResourceRenderer):
    kind = "product-card"
    grid_kind = "product-cards"
    label = "Product card"
    config_section = "product_cards"

    # ======== External interface ========

    def render(self, config: AppConfig, resource_id: str, context: Any = None, **options) -> Optional[PackagedResource]:
        display_mode = options.get("display_mode")
        if display_mode is not None and display_mode not in DISPLAY_MODES:
            raise ValueError(f"Unknown display mode: {display_mode}")
        return super().render(config, resource_id, context, **options)

    def build_html(self, resource: ProductCard, context: RenderContext, display_mode: Optional[str] = None, **options) -> str:
        mode = display_mode or resource.display_mode
        body = f'<div class="product-container product-container-{mode}">\n{self.render_card(resource, mode, 0)}\n</div>'
        return render_document(resource.title, body, styles=PRODUCT_CARD_STYLES)

    def render_many(
        self,
        config: AppConfig,
        resource_ids: Sequence[str],
        context: Any = None,
        display_mode: Optional[str] = None,
    ) -> Optional[PackagedResource]:
        """Render a grid of product cards.

        Unknown ids are skipped; ResourceNotFoundError is raised only when none resolve.
        Returns None when every resolved card is ineligible under the context."""
        if display_mode is not None and display_mode not in DISPLAY_MODES:
            raise ValueError(f"Unknown display mode: {display_mode}")

        entries = config.product_cards or {}
        found: List[str] = []
        for resource_id in resource_ids:
            if resource_id not in entries:
                logger.warning(f"Product card '{resource_id}' not found, skipped from grid")
                continue
            found.append(resource_id)
        if not found:
            raise ResourceNotFoundError("Product cards", ", ".join(resource_ids))

        ctx = RenderContext.from_value(context)
        eligible_ids = [
            resource_id for resource_id in found if self.trigger_evaluator.is_eligible(entries[resource_id], ctx)
        ]
        eligible = [entries[resource_id] for resource_id in eligible_ids]
        if not eligible:
            logger.debug(f"No product card of {list(resource_ids)} eligible for event {ctx.event!r}")
            return None

        items = "\n".join(
            self.render_card(card, display_mode or card.display_mode, index) for index, card in enumerate(eligible)
        )
        html_string = render_document("Products", f'<div class="product-grid">\n{items}\n</div>', styles=PRODUCT_CARD_STYLES)
        # grid address: "<id>+<id>/<instance>", matching the single card "<id>/<instance>" form
        contextual_id = f"{GRID_ID_SEPARATOR.join(eligible_ids)}/{self.packager.new_instance_id()}"
        return self.packager.package_resource(self.grid_kind, html_string, contextual_id)

    def render_card(self, product: ProductCard, mode: str, index: int) -> str:
        """Markup of one card in the given layout; index keeps tab ids unique inside a grid."""
        renderer = getattr(self, f"_render_{mode}_mode")
        return renderer(product, index)

    # ======== Layouts ========

    def _render_card_mode(self, product: ProductCard, index: int) -> str:
        percent = discount_percentage(product.price, product.sale_price)
        brand_html = f'<div class="product-brand">{escape_html(product.brand)}</div>' if product.brand else ""
        trend_html = (
            f'<div class="pricing-trend">{escape_html(product.pricing_trend)}</div>' if product.pricing_trend else ""
        )
        discount_html = f'<div class="discount-badge">{percent}% OFF</div>' if percent is not None else ""
        description = escape_html(truncate(product.description, CARD_DESCRIPTION_LIMIT))
        return f"""
    <div class="product-card" data-product-id="{escape_html(product.id)}">
      <div class="product-image-container">
        <img src="{escape_html(product.image_link)}" alt="{escape_html(product.title)}" class="product-image" loading="lazy">
        {self._availability_badge(product)}
        {discount_html}
      </div>
      <div class="product-info">
        {brand_html}
        <h3 class="product-title">{escape_html(product.title)}</h3>
        {self._rating_html(product)}
        <p class="product-description">{description}</p>
        {self._pricing_html(product)}
        {trend_html}
        {self._variant_html(product)}
        {self._tabs_html(product, index)}
        {self._cta_html(product)}
      </div>
    </div>"""

    def _render_list_mode(self, product: ProductCard, index: int) -> str:
        percent = discount_percentage(product.price, product.sale_price)
        brand_html = f'<div class="product-brand">{escape_html(product.brand)}</div>' if product.brand else ""
        discount_html = f'<div class="discount-badge">{percent}% OFF</div>' if percent is not None else ""
        description = escape_html(truncate(product.description, LIST_DESCRIPTION_LIMIT))
        return f"""
    <div class="product-card-list" data-product-id="{escape_html(product.id)}">
      <div class="product-image-container-list">
        <img src="{escape_html(product.image_link)}" alt="{escape_html(product.title)}" class="product-image-list" loading="lazy">
        {discount_html}
      </div>
      <div class="product-info-list">
        {brand_html}
        <h3 class="product-title">{escape_html(product.title)}</h3>
        {self._rating_html(product)}
        <p class="product-description-list">{description}</p>
        {self._variant_html(product)}
      </div>
      <div class="product-actions-list">
        {self._availability_badge(product)}
        {self._pricing_html(product)}
        {self._cta_html(product)}
      </div>
    </div>"""

    def _render_compact_mode(self, product: ProductCard, index: int) -> str:
        return f"""
    <div class="product-card-compact" data-product-id="{escape_html(product.id)}">
      <img src="{escape_html(product.image_link)}" alt="{escape_html(product.title)}" class="product-image-compact" loading="lazy">
      <div class="product-info-compact">
        <a class="product-title-compact" href="{escape_html(product.link)}" target="_blank" rel="noopener noreferrer">{escape_html(product.title)}</a>
        {self._pricing_html(product, compact=True)}
      </div>
    </div>"""

    # ======== Fragments ========

    def _pricing_html(self, product: ProductCard, compact: bool = False) -> str:
        amount, currency = split_price(product.price)
        css = "product-pricing-compact" if compact else "product-pricing"
        if discount_percentage(product.price, product.sale_price) is None:
            return f'<div class="{css}"><span class="product-price">{escape_html(format_price(amount, currency))}</span></div>'
        sale_amount, sale_currency = split_price(product.sale_price)
        return (
            f'<div class="{css}">'
            f'<span class="product-price-sale">{escape_html(format_price(sale_amount, sale_currency))}</span>'
            f'<span class="product-price product-price-original">{escape_html(format_price(amount, currency))}</span>'
            f"</div>"
        )

    def _availability_badge(self, product: ProductCard) -> str:
        if product.availability == "in_stock":
            text = f"{product.inventory_quantity} in stock" if product.inventory_quantity else "In Stock"
            return f'<div class="availability-badge in-stock">{text}</div>'
        if product.availability == "out_of_stock":
            return '<div class="availability-badge out-of-stock">Out of Stock</div>'
        date_html = (
            f' <span class="availability-date">{escape_html(product.availability_date)}</span>'
            if product.availability_date
            else ""
        )
        return f'<div class="availability-badge preorder">Pre-order{date_html}</div>'

    def _rating_html(self, product: ProductCard) -> str:
        rating = product.product_review_rating
        if not rating:
            return ""
        count = product.product_review_count
        review_text = f" ({count:,} reviews)" if count else ""
        return (
            f'<div class="product-rating">'
            f'<span class="rating-stars" title="{rating:.1f} out of 5">{rating_stars(rating)}</span>'
            f'<span class="rating-count">{review_text}</span>'
            f"</div>"
        )

    def _variant_html(self, product: ProductCard) -> str:
        variants = []
        if product.color:
            variants.append(f"Color: {escape_html(product.color)}")
        if product.size:
            variants.append(f"Size: {escape_html(product.size)}")
        if not variants:
            return ""
        return f'<div class="product-variants">{" • ".join(variants)}</div>'

    def _feature_rows(self, product: ProductCard) -> List[Tuple[str, str]]:
        rows: List[Tuple[str, str]] = []
        if product.material:
            rows.append(("Material", product.material))
        if product.condition:
            rows.append(("Condition", product.condition.capitalize()))
        if product.age_group:
            rows.append(("Age group", product.age_group.capitalize()))
        if product.gender:
            rows.append(("Gender", product.gender.capitalize()))
        for slot in (1, 2, 3):
            category = getattr(product, f"custom_variant{slot}_category")
            option = getattr(product, f"custom_variant{slot}_option")
            if category and option:
                rows.append((category, option))
        if product.shipping:
            rows.append(("Shipping", product.shipping))
        if product.delivery_estimate:
            rows.append(("Delivery", product.delivery_estimate))
        if product.return_window:
            rows.append(("Returns", f"{product.return_window}-day returns"))
        if product.warning:
            rows.append(("Warning", product.warning))
        return rows

    def _spec_rows(self, product: ProductCard) -> List[Tuple[str, str]]:
        rows: List[Tuple[str, str]] = []
        for label, value in (
            ("Brand", product.brand),
            ("Category", product.product_category),
            ("Dimensions", product.dimensions),
            ("Weight", product.weight),
            ("Size system", product.size_system),
            ("GTIN", product.gtin),
            ("MPN", product.mpn),
            ("Seller", product.seller_name),
        ):
            if value:
                rows.append((label, value))
        return rows

    def _tabs_html(self, product: ProductCard, index: int) -> str:
        features = self._feature_rows(product)
        specs = self._spec_rows(product)
        if not features and not specs:
            return ""
        group = f"product-tabs-{index}"

        def panel(rows: List[Tuple[str, str]]) -> str:
            if not rows:
                return '<p class="tab-empty">No details available</p>'
            items = "".join(
                f"<li><span class=\"tab-key\">{escape_html(key)}</span>"
                f"<span class=\"tab-value\">{escape_html(value)}</span></li>"
                for key, value in rows
            )
            return f'<ul class="tab-list">{items}</ul>'

        return f"""<div class="product-tabs">
          <input type="radio" class="tab-input" name="{group}" id="{group}-features" checked>
          <label class="tab-label" for="{group}-features">Features</label>
          <input type="radio" class="tab-input" name="{group}" id="{group}-specs">
          <label class="tab-label" for="{group}-specs">Specifications</label>
          <div class="tab-panel tab-panel-features">{panel(features)}</div>
          <div class="tab-panel tab-panel-specs">{panel(specs)}</div>
        </div>"""

    def _cta_html(self, product: ProductCard) -> str:
        if product.availability == "out_of_stock":
            label = "View Product"
        elif product.availability == "preorder":
            label = "Pre-order Now"
        elif product.enable_checkout:
            label = "Buy Now"
        else:
            label = "View Product"
        return (
            f'<a class="cta-button" href="{escape_html(product.link)}" target="_blank" '
            f'rel="noopener noreferrer">{label}</a>'
        )


PRODUCT_CARD_STYLES = """
    .product-container { max-width: 400px; margin: 0 auto; }
    .product-container-list { max-width: 800px; }
    .product-container-compact { max-width: 600px; }
    .product-grid {
      display: grid;
      grid-template-columns: repeat(auto-fill, minmax(280px, 1fr));
      gap: 20px;
      max-width: 1200px;
      margin: 0 auto;
    }

    /* Card mode */
    .product-card {
      background: white;
      border-radius: 12px;
      overflow: hidden;
      box-shadow: 0 2px 8px rgba(0,0,0,0.1);
      transition: transform 0.2s, box-shadow 0.2s;
    }
    .product-card:hover { transform: translateY(-4px); box-shadow: 0 4px 16px rgba(0,0,0,0.15); }
    .product-image-container { position: relative; width: 100%; padding-top: 100%; background: #f9f9f9; overflow: hidden; }
    .product-image { position: absolute; top: 0; left: 0; width: 100%; height: 100%; object-fit: cover; }
    .product-info { padding: 16px; }
    .product-brand { font-size: 12px; color: #666; text-transform: uppercase; letter-spacing: 0.5px; margin-bottom: 4px; }
    .product-title { font-size: 16px; font-weight: 600; margin: 0 0 8px 0; line-height: 1.4; }
    .product-description { font-size: 14px; color: #666; margin: 8px 0; line-height: 1.5; }
    .product-rating { display: flex; align-items: center; gap: 6px; margin-bottom: 8px; font-size: 14px; }
    .rating-stars { color: #ffa500; letter-spacing: 2px; }
    .rating-count { color: #666; font-size: 12px; }
    .product-pricing, .product-pricing-compact { display: flex; align-items: baseline; gap: 8px; margin: 12px 0; }
    .product-price { font-size: 20px; font-weight: 700; }
    .product-price-sale { font-size: 20px; font-weight: 700; color: #d32f2f; }
    .product-price-original { font-size: 14px; color: #999; text-decoration: line-through; font-weight: 400; }
    .pricing-trend { font-size: 12px; color: #2e7d32; margin-bottom: 8px; }
    .product-variants { font-size: 13px; color: #666; margin-bottom: 12px; }

    /* Badges */
    .availability-badge {
      position: absolute; top: 12px; left: 12px;
      padding: 4px 12px; border-radius: 4px;
      font-size: 12px; font-weight: 600; text-transform: uppercase;
    }
    .availability-badge.in-stock { background: #4caf50; color: white; }
    .availability-badge.out-of-stock { background: #f44336; color: white; }
    .availability-badge.preorder { background: #ff9800; color: white; }
    .discount-badge {
      position: absolute; top: 12px; right: 12px;
      background: #d32f2f; color: white;
      padding: 4px 12px; border-radius: 4px;
      font-size: 12px; font-weight: 700;
    }

    /* CSS-only tabs */
    .product-tabs { display: flex; flex-wrap: wrap; margin: 12px 0; border-top: 1px solid #eee; }
    .tab-input { position: absolute; opacity: 0; pointer-events: none; }
    .tab-label { padding: 8px 12px; font-size: 13px; font-weight: 600; color: #666; cursor: pointer; border-bottom: 2px solid transparent; }
    .tab-panel { display: none; width: 100%; padding: 8px 0; font-size: 13px; }
    .tab-input:nth-of-type(1):checked + .tab-label,
    .tab-input:nth-of-type(2):checked + .tab-label { color: #1976d2; border-bottom-color: #1976d2; }
    .tab-input:nth-of-type(1):checked ~ .tab-panel-features,
    .tab-input:nth-of-type(2):checked ~ .tab-panel-specs { display: block; }
    .tab-list { list-style: none; margin: 0; padding: 0; }
    .tab-list li { display: flex; justify-content: space-between; padding: 4px 0; border-bottom: 1px dashed #eee; }
    .tab-key { color: #666; }
    .tab-empty { color: #999; margin: 0; }

    .cta-button {
      display: block; width: 100%; padding: 12px;
      background: #1976d2; color: white; text-align: center; text-decoration: none;
      border-radius: 8px; font-size: 14px; font-weight: 600;
      transition: background 0.2s;
    }
    .cta-button:hover { background: #1565c0; }

    /* List mode */
    .product-card-list {
      display: flex; background: white; border-radius: 12px; overflow: hidden;
      box-shadow: 0 2px 8px rgba(0,0,0,0.1); margin-bottom: 16px;
    }
    .product-image-container-list { position: relative; width: 200px; flex-shrink: 0; background: #f9f9f9; }
    .product-image-list { width: 100%; height: 100%; object-fit: cover; }
    .product-info-list { flex: 1; padding: 16px; }
    .product-description-list { font-size: 14px; color: #666; margin: 8px 0; line-height: 1.5; }
    .product-actions-list { display: flex; flex-direction: column; justify-content: space-between; padding: 16px; min-width: 180px; }
    .product-actions-list .availability-badge { position: static; display: inline-block; text-align: center; }

    /* Compact mode */
    .product-card-compact {
      display: flex; align-items: center; gap: 12px;
      background: white; border-radius: 8px; padding: 12px;
      box-shadow: 0 1px 4px rgba(0,0,0,0.1);
    }
    .product-image-compact { width: 60px; height: 60px; object-fit: cover; border-radius: 4px; }
    .product-info-compact { flex: 1; min-width: 0; }
    .product-title-compact {
      display: block; font-size: 14px; font-weight: 600; color: inherit; text-decoration: none;
      white-space: nowrap; overflow: hidden; text-overflow: ellipsis;
    }
    .product-pricing-compact { margin: 4px 0 0 0; }
    .product-pricing-compact .product-price, .product-pricing-compact .product-price-sale { font-size: 16px; }

    @media (max-width: 600px) {
      .product-card-list { flex-direction: column; }
      .product-image-container-list { width: 100%; height: 200px; }
    }
"""


__all__ = [
    "CURRENCY_SYMBOLS",
    "format_price",
    "discount_percentage",
    "rating_stars",
    "truncate",
    "ProductCardRenderer",
]
