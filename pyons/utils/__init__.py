"""Utility modules for the pyons package.

This package contains helpers for locating per-user files such as the
default credential file.
"""
