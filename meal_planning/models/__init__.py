"""
Data models for the meal planning engine.
"""
