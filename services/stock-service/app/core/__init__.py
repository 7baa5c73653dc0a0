"""
Core infrastructure - connection management shared by the application.
"""
