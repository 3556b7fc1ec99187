"""
Pipeline stages for the DataLoader.

Contains the in-memory transformation steps:
- Record Parser
- Tag Aggregator
- Movie Enricher
"""
