'''Interfaces between cipt and external molecule toolkits'''
