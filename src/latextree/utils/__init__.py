#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/utils/__init__.py
"""Utility helpers for latextree."""
