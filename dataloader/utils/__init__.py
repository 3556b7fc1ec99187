"""
Utility modules for the DataLoader.

Cross-cutting concerns:
- Deadline: run-wide time budget for the publish steps
"""
