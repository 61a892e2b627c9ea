# coding: utf-8

'''
Dice fulfillment configuration.
'''
