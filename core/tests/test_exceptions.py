"""
Core — Exception handler and renderer tests

@file core/tests/test_exceptions.py
"""

import json

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import OperationalError
from django.http import Http404
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from core.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    InvalidStateTransition,
    QuantityViolation,
    standard_exception_handler,
)
from core.renderers import StandardJSONRenderer

CONTEXT = {'view': None, 'request': None}


class TestStandardExceptionHandler:

    def test_domain_error_envelope(self):
        resp = standard_exception_handler(InvalidStateTransition(detail='nope'), CONTEXT)
        assert resp.status_code == 400
        assert resp.data['success'] is False
        assert resp.data['code'] == 'INVALID_STATE_TRANSITION'
        assert resp.data['errors']['detail'] == 'nope'

    def test_quantity_violation_code(self):
        resp = standard_exception_handler(QuantityViolation(), CONTEXT)
        assert resp.status_code == 400
        assert resp.data['code'] == 'QUANTITY_VIOLATION'

    def test_invalid_input_is_validation_error(self):
        resp = standard_exception_handler(InvalidInputError(detail='empty'), CONTEXT)
        assert resp.data['code'] == 'VALIDATION_ERROR'

    def test_insufficient_stock_is_conflict(self):
        resp = standard_exception_handler(InsufficientStockError(), CONTEXT)
        assert resp.status_code == 409
        assert resp.data['code'] == 'INSUFFICIENT_STOCK'

    def test_serializer_error(self):
        resp = standard_exception_handler(ValidationError({'quantity': ['required']}), CONTEXT)
        assert resp.status_code == 400
        assert resp.data['code'] == 'VALIDATION_ERROR'
        assert 'quantity' in resp.data['errors']

    def test_django_validation_error(self):
        resp = standard_exception_handler(DjangoValidationError({'sku': ['bad']}), CONTEXT)
        assert resp.status_code == 400
        assert resp.data['errors'] == {'sku': ['bad']}

    def test_http404(self):
        resp = standard_exception_handler(Http404(), CONTEXT)
        assert resp.status_code == 404
        assert resp.data['code'] == 'RESOURCE_NOT_FOUND'

    def test_database_error_is_infrastructure(self):
        resp = standard_exception_handler(OperationalError('connection lost'), CONTEXT)
        assert resp.status_code == 503
        assert resp.data['code'] == 'INFRASTRUCTURE_ERROR'

    def test_unhandled_is_internal_error(self):
        resp = standard_exception_handler(RuntimeError('boom'), CONTEXT)
        assert resp.status_code == 500
        assert resp.data['code'] == 'INTERNAL_ERROR'


class TestStandardJSONRenderer:

    def _render(self, data, status_code=200):
        response = Response(data, status=status_code)
        out = StandardJSONRenderer().render(data, renderer_context={'response': response})
        return json.loads(out)

    def test_wraps_plain_payload(self):
        assert self._render({'id': 1}) == {'success': True, 'data': {'id': 1}}

    def test_moves_pagination_into_meta(self):
        body = self._render({
            'count': 3, 'page': 1, 'total_pages': 1,
            'next': None, 'previous': None, 'results': [1, 2, 3],
        })
        assert body['data'] == [1, 2, 3]
        assert body['meta']['count'] == 3

    def test_plain_list_gets_count(self):
        body = self._render([{'id': 1}, {'id': 2}])
        assert body == {'success': True, 'data': [{'id': 1}, {'id': 2}], 'meta': {'count': 2}}

    def test_error_envelope_untouched(self):
        payload = {'success': False, 'errors': {}, 'code': 'X'}
        assert self._render(payload, status_code=400) == payload
