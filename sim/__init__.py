"""Headless runners for geoar."""
