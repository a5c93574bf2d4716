"""Tabspace - multi-tab workspace state manager."""
