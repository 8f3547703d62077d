"""
Data models for Iris.

This module contains the configuration tree: configs, headers, keys and values.
"""

from .config import Header, IrisConfig, Key, Value

__all__ = ['Header', 'IrisConfig', 'Key', 'Value']
