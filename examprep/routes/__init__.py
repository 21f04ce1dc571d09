"""
Routes Package
Exports all route blueprints
"""
from examprep.routes.api import api_bp

__all__ = ['api_bp']
