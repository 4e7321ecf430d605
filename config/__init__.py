"""
Configuration package for devprovision.
"""
