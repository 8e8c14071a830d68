"""
Category module: taxonomy tree for places
"""
