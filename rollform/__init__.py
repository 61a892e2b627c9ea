# coding: utf-8

'''
Rollform: dice formula parsing & evaluation.

Importing the package registers the roll and term classes.
'''

from .dice import Roll

__all__ = [
    'Roll',
]
