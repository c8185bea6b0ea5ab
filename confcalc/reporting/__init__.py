"""Presentation helpers for prices."""
