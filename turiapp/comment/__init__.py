"""
Comment module: threaded comments on reviews
"""
