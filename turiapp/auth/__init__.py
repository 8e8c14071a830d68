"""
Auth module: login, registration, tokens and password flows
"""
