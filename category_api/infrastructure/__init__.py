"""Infrastructure layer module.

Contains configuration, database wiring and logging setup.
"""
