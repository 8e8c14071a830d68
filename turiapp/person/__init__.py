"""
Person module: optional public profile attached to a user
"""
