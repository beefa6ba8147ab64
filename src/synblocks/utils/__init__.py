"""
Module containing various utility functions and classes.
"""
from synblocks.utils.resources import RESOURCES, Resources, jit

__all__ = ['RESOURCES', 'Resources', 'jit']
