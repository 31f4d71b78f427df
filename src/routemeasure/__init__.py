"""routemeasure: measure/coordinate conversion along linear referenced routes."""

__version__ = '0.1.0'
