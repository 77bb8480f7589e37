"""
Reports — Query Parameter Serializers

@file reports/serializers.py
"""

from rest_framework import serializers

from stock.models import StockMovement


class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get('start_date'), attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError({'end_date': 'end_date must not be before start_date.'})
        return attrs


class MovementReportSerializer(DateRangeSerializer):
    product = serializers.UUIDField(required=False)
    movement_type = serializers.ChoiceField(
        choices=StockMovement.MovementType.choices, required=False,
    )
