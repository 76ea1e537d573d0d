"""
Edge server exposing the tablet playlist and impression endpoints.
"""
