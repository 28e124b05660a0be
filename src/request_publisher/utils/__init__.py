"""Utility modules for request publishers."""

from .sanitizer import mask_sensitive_data, mask_headers, mask_url

__all__ = [
    'mask_sensitive_data',
    'mask_headers',
    'mask_url',
]
