"""
Extract instructor office hours from Canvas course content and export them
as calendar events for one week.
"""
__version__ = "0.1.0"
