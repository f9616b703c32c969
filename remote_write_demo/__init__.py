"""Prometheus remote-write demo client."""
