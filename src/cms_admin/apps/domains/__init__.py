"""
Domains application for the CMS admin service.

This package provides domain configuration management: reconciling persisted
domains with their filesystem configs, and managing domain membership.
"""
