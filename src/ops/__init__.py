"""
Operational helpers.
"""
