"""Numeric core and Flask/Socket.IO backend for interactive ML algorithm demos."""

__version__ = '1.0.0'
