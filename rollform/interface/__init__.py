# coding: utf-8

'''
Ways for the outside world to talk to the dice engine.
'''
