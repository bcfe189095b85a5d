"""
Scheduling Engine

Pure slot arithmetic shared by the availability, booking and plan services.
"""
