"""
Planning services: filtering, scoring, selection and orchestration.
"""
