"""
TuriApp REST API
"""
