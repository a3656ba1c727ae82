"""Card table simulation: seating, role rotation and betting rounds."""
__version__ = "0.1.0"
