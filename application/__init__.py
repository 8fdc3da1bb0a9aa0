"""
Application Layer for the IronLog Progression API.

Part of IRL-5: Define storage and catalog ports

This package contains:
- ports/: Abstract interfaces (what the core needs from storage and catalog)
- use_cases/: Application services coordinating the core for the UI layer
- exceptions: Errors shared by application and infrastructure layers
"""
