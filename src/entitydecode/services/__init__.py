"""
Stateless decoding services.

This package contains the backing stores, content-transfer decoder,
charset manager, header decoder, address parser and middleware stack.
"""

__all__ = ['addresses', 'charset', 'headers', 'middleware', 'store', 'transfer']
