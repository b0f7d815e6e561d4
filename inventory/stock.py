"""
Low-stock evaluation.

Pure functions classifying stock health and suggesting reorder quantities.
Nothing here touches the database, so the same rules serve the dashboard,
the low-stock report and the periodic alert scan.
"""
from enum import Enum
from typing import Iterable, List

from django.core.exceptions import ImproperlyConfigured


class StockStatus(str, Enum):
    OUT_OF_STOCK = 'out_of_stock'
    LOW_STOCK = 'low_stock'
    IN_STOCK = 'in_stock'

    @property
    def label(self) -> str:
        return STOCK_STATUS_LABELS[self]


STOCK_STATUS_LABELS = {
    StockStatus.OUT_OF_STOCK: 'Out of Stock',
    StockStatus.LOW_STOCK: 'Low Stock',
    StockStatus.IN_STOCK: 'In Stock',
}

if set(STOCK_STATUS_LABELS) != set(StockStatus):
    raise ImproperlyConfigured(
        f"Stock status labels missing for {set(StockStatus) - set(STOCK_STATUS_LABELS)}"
    )


def stock_status(quantity: int, reorder_level: int) -> StockStatus:
    """
    Classify stock health.

    A quantity exactly at the reorder level is already low.
    """
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= reorder_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def is_low_stock(quantity: int, reorder_level: int) -> bool:
    """True for low and out-of-stock products alike."""
    return quantity <= reorder_level


def suggested_reorder_quantity(quantity: int, reorder_level: int) -> int:
    """
    Units to order to bring stock back to twice the reorder level.

    Never suggests less than the reorder level itself.
    """
    return max(reorder_level * 2 - quantity, reorder_level)


def stock_ratio(quantity: int, reorder_level: int) -> float:
    if reorder_level <= 0:
        return 0.0
    return quantity / reorder_level


def sort_by_severity(products: Iterable) -> List:
    """Most critically understocked products first."""
    return sorted(products, key=lambda p: stock_ratio(p.quantity, p.reorder_level))


def low_stock_report(products: Iterable) -> List[dict]:
    """
    Build report rows for products at or below their reorder level.

    Args:
        products: Objects exposing id, sku, name, quantity and reorder_level

    Returns:
        Rows sorted by severity, each with status and suggested reorder quantity
    """
    low = [p for p in products if is_low_stock(p.quantity, p.reorder_level)]
    rows = []
    for product in sort_by_severity(low):
        status = stock_status(product.quantity, product.reorder_level)
        rows.append({
            'id': product.id,
            'sku': product.sku,
            'name': product.name,
            'quantity': product.quantity,
            'reorder_level': product.reorder_level,
            'status': status.value,
            'status_label': status.label,
            'stock_ratio': round(stock_ratio(product.quantity, product.reorder_level), 4),
            'suggested_reorder_quantity': suggested_reorder_quantity(
                product.quantity, product.reorder_level
            ),
        })
    return rows
