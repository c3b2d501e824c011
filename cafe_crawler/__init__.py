"""
Café beverage-menu crawler framework.
"""
