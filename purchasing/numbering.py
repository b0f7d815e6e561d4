"""
Purchase order number generator.

Numbers look like PO-2026-00042: a per-year sequence kept in OrderSequence
and advanced under a row lock, so concurrent requests never share a number.
"""
from datetime import date
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import OrderSequence

ORDER_NUMBER_PREFIX = 'PO'


def format_order_number(year: int, number: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}-{year}-{number:05d}"


def next_order_number(today: Optional[date] = None) -> str:
    year = (today or timezone.localdate()).year
    with transaction.atomic():
        sequence, _ = OrderSequence.objects.select_for_update().get_or_create(year=year)
        OrderSequence.objects.filter(pk=sequence.pk).update(last_number=F('last_number') + 1)
        sequence.refresh_from_db(fields=['last_number'])
    return format_order_number(year, sequence.last_number)
