"""
Place module: points of interest
"""
