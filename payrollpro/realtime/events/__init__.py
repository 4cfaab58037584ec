"""Domain-specific realtime publishers.

These modules contain *publish* helpers only (build payload + emit).
"""
