"""
Court facilities operations service.
"""
