"""
Favorite module: places saved by users
"""
