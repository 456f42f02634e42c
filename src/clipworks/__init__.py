"""Clipworks: short-lived media transformations published to object storage."""
