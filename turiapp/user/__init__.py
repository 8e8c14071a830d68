"""
User module: accounts and admin user management
"""
