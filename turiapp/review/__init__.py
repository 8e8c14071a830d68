"""
Review module: ratings, reviews and helpful votes
"""
