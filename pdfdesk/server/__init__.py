"""
Local processing service for the PDF tools.
"""
from .app import create_app
from .config import ServiceConfig
from .storage import LocalStorage

__all__ = ['create_app', 'ServiceConfig', 'LocalStorage']
