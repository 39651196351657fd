"""
Storage module for Exchange
"""

from .json_storage import JsonStorage

__all__ = ['JsonStorage']
