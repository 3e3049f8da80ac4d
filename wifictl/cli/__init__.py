"""CLI module for wifictl."""
