"""ScholarHub notification service package.

Ensures the local ``scholarhub`` package is imported as a regular package
instead of a namespace package.
"""
