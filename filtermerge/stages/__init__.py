"""Merge stages: child fan-out, rank scoring, identity dedup.

Each stage exposes a small function API; ``filtermerge.merge`` wires them
together in order.
"""
