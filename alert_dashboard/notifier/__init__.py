"""Transient user notices."""
