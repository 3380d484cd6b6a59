"""
Prisma Points - employee recognition and rewards portal backend.
"""
__version__ = "1.0.0"
