"""
Domain layer for entity decoding.

This layer contains:
- Data models (address entries)
- The Entity facade composing the decoding services
"""
