"""
Application Layer

Orchestrates domain objects and infrastructure to fulfil music commands.

Structure:
- services/: the Music Board engine and song resolution
- interfaces/: Port interfaces for infrastructure adapters
"""
