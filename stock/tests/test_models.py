"""
Stock — Model Tests

StockMovement is insert-only and its quantity sign depends on the type.

@file stock/tests/test_models.py
"""

import pytest
from django.db import IntegrityError, transaction

from stock.models import StockMovement
from tests.factories import ProductFactory


pytestmark = pytest.mark.django_db


def _movement(product, movement_type, quantity):
    movement = StockMovement(product=product, movement_type=movement_type, quantity=quantity)
    movement.save()
    return movement


class TestStockMovement:

    @pytest.mark.parametrize('movement_type, quantity, expected', [
        (StockMovement.MovementType.PURCHASE, 5, 5),
        (StockMovement.MovementType.RETURN, 2, 2),
        (StockMovement.MovementType.SALE, 3, -3),
        (StockMovement.MovementType.LOSS, 1, -1),
        (StockMovement.MovementType.ADJUSTMENT, -4, -4),
    ])
    def test_signed_quantity(self, movement_type, quantity, expected):
        movement = StockMovement(movement_type=movement_type, quantity=quantity)
        assert movement.signed_quantity == expected

    def test_update_is_refused(self):
        movement = _movement(ProductFactory(), StockMovement.MovementType.PURCHASE, 5)
        movement.quantity = 50
        with pytest.raises(NotImplementedError):
            movement.save()

    def test_delete_is_refused(self):
        movement = _movement(ProductFactory(), StockMovement.MovementType.PURCHASE, 5)
        with pytest.raises(NotImplementedError):
            movement.delete()

    def test_zero_quantity_rejected_by_database(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            _movement(ProductFactory(), StockMovement.MovementType.ADJUSTMENT, 0)

    def test_negative_sale_rejected_by_database(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            _movement(ProductFactory(), StockMovement.MovementType.SALE, -2)
