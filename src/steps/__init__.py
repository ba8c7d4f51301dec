"""Firmware tree maintenance steps.

This package holds the handlers dispatched by the pipeline driver.
Each handler edits the build tree in place and raises on failure.
"""
