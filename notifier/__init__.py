"""Realtime notification session package.

Ensures the local ``notifier`` package is resolved as a regular package so the
session core can be imported without the HTTP adapter being loaded.
"""
