"""
Test package for layerconf.

- unit/: unit tests for the configuration layers, CLI and HTTP route
"""
