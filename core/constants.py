"""
Core — Shared Constants

Audit action identifiers and pagination limits used across apps.

@file core/constants.py
"""

from decimal import Decimal

AUDIT_ACTION_CREATE = 'CREATE'
AUDIT_ACTION_UPDATE = 'UPDATE'
AUDIT_ACTION_DELETE = 'DELETE'
AUDIT_ACTION_DEACTIVATE = 'DEACTIVATE'
AUDIT_ACTION_STATUS_CHANGE = 'STATUS_CHANGE'
AUDIT_ACTION_STOCK_ADJUSTMENT = 'STOCK_ADJUSTMENT'
AUDIT_ACTION_LOGIN = 'LOGIN'
AUDIT_ACTION_LOGOUT = 'LOGOUT'

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 200

# Money columns: Decimal(10, 2)
MONEY_MAX_DIGITS = 10
MONEY_DECIMAL_PLACES = 2
TOTAL_MAX_DIGITS = 12
MIN_UNIT_PRICE = Decimal('0.01')

# Largest quantity accepted on one order or sale line.
MAX_LINE_QUANTITY = 100_000
# Line and document totals must stay below this to fit TOTAL_MAX_DIGITS.
MAX_TOTAL_AMOUNT = 10 ** (TOTAL_MAX_DIGITS - MONEY_DECIMAL_PLACES)
