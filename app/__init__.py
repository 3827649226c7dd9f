"""
HTTP layer for the transaction import service.
"""
