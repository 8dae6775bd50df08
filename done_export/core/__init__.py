"""
Core models, query construction and shared helpers.
"""
