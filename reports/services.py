"""
Reports — Aggregation Services

Read-only summaries computed with ORM aggregates. Nothing here writes or
locks; money values are quantized to the cent.

@file reports/services.py
"""

from decimal import Decimal

from django.db.models import Count, DecimalField, ExpressionWrapper, F, IntegerField, Q, Sum, Value
from django.db.models.functions import Coalesce, TruncDate

from inventory.models import Category, Product
from sales.models import Sale, SaleItem
from stock.models import StockMovement

TOP_PRODUCTS_LIMIT = 10

CENT = Decimal('0.01')
ZERO_MONEY = Value(Decimal('0'), output_field=DecimalField(max_digits=14, decimal_places=2))


def _money(value) -> Decimal:
    return (value or Decimal('0')).quantize(CENT)


def _stock_value():
    return ExpressionWrapper(
        F('current_stock') * F('purchase_price'),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


def _date_filter(field, start_date=None, end_date=None) -> Q:
    q = Q()
    if start_date:
        q &= Q(**{f'{field}__date__gte': start_date})
    if end_date:
        q &= Q(**{f'{field}__date__lte': end_date})
    return q


class ReportService:

    @staticmethod
    def sales_summary(*, start_date=None, end_date=None) -> dict:
        """
        COMPLETED sales in the range: totals, revenue per day and per
        payment method, and the best-selling products by units kept by
        customers (sold minus returned).
        """
        sales = Sale.objects.filter(
            _date_filter('sale_date', start_date, end_date),
            status=Sale.StatusChoices.COMPLETED,
        )
        totals = sales.aggregate(
            count=Count('id'),
            revenue=Coalesce(Sum('total_amount'), ZERO_MONEY),
        )

        by_day = (
            sales.annotate(day=TruncDate('sale_date'))
            .values('day')
            .annotate(count=Count('id'), revenue=Sum('total_amount'))
            .order_by('day')
        )
        by_payment = (
            sales.values('payment_method')
            .annotate(count=Count('id'), revenue=Sum('total_amount'))
            .order_by('payment_method')
        )
        top_products = (
            SaleItem.objects.filter(sale__in=sales)
            .values('product_id', 'product__sku', 'product__name')
            .annotate(
                units=Sum(
                    F('quantity') - F('returned_quantity'),
                    output_field=IntegerField(),
                ),
                revenue=Sum('total'),
            )
            .filter(units__gt=0)
            .order_by('-units', 'product__sku')[:TOP_PRODUCTS_LIMIT]
        )

        return {
            'start_date': start_date.isoformat() if start_date else None,
            'end_date': end_date.isoformat() if end_date else None,
            'sales_count': totals['count'],
            'revenue': _money(totals['revenue']),
            'by_day': [
                {'date': row['day'].isoformat(), 'count': row['count'], 'revenue': _money(row['revenue'])}
                for row in by_day
            ],
            'by_payment_method': [
                {
                    'payment_method': row['payment_method'],
                    'count': row['count'],
                    'revenue': _money(row['revenue']),
                }
                for row in by_payment
            ],
            'top_products': [
                {
                    'product_id': str(row['product_id']),
                    'sku': row['product__sku'],
                    'name': row['product__name'],
                    'quantity': row['units'],
                    'revenue': _money(row['revenue']),
                }
                for row in top_products
            ],
        }

    @staticmethod
    def inventory_summary() -> dict:
        """Active catalogue: product count, valuation at cost, low-stock count, per category."""
        products = Product.objects.active()
        totals = products.aggregate(
            product_count=Count('id'),
            total_units=Coalesce(Sum('current_stock'), Value(0)),
            stock_value=Coalesce(Sum(_stock_value()), ZERO_MONEY),
            low_stock_count=Count('id', filter=Q(current_stock__lte=F('minimum_stock'))),
        )

        categories = (
            Category.objects.annotate(
                product_count=Count('products', filter=Q(products__is_active=True)),
                total_units=Coalesce(
                    Sum('products__current_stock', filter=Q(products__is_active=True)),
                    Value(0),
                ),
                stock_value=Coalesce(
                    Sum(
                        ExpressionWrapper(
                            F('products__current_stock') * F('products__purchase_price'),
                            output_field=DecimalField(max_digits=14, decimal_places=2),
                        ),
                        filter=Q(products__is_active=True),
                    ),
                    ZERO_MONEY,
                ),
            )
            .order_by('name')
        )

        return {
            'product_count': totals['product_count'],
            'total_units': totals['total_units'],
            'stock_value': _money(totals['stock_value']),
            'low_stock_count': totals['low_stock_count'],
            'by_category': [
                {
                    'category_id': str(c.pk),
                    'name': c.name,
                    'product_count': c.product_count,
                    'total_units': c.total_units,
                    'stock_value': _money(c.stock_value),
                }
                for c in categories
            ],
        }

    @staticmethod
    def movement_summary(*, start_date=None, end_date=None, product_id=None, movement_type=None) -> dict:
        movements = StockMovement.objects.filter(_date_filter('created_at', start_date, end_date))
        if product_id:
            movements = movements.filter(product_id=product_id)
        if movement_type:
            movements = movements.filter(movement_type=movement_type)

        rows = (
            movements.values('movement_type')
            .annotate(count=Count('id'), total_quantity=Sum('quantity'))
            .order_by('movement_type')
        )
        return {
            'start_date': start_date.isoformat() if start_date else None,
            'end_date': end_date.isoformat() if end_date else None,
            'product_id': str(product_id) if product_id else None,
            'movement_count': sum(row['count'] for row in rows),
            'by_type': [
                {
                    'movement_type': row['movement_type'],
                    'count': row['count'],
                    'total_quantity': row['total_quantity'],
                }
                for row in rows
            ],
        }
