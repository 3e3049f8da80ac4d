"""Utility helpers for wifictl."""
