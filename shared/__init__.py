"""
Shared Kernel

Base classes and utilities shared by the booking and review contexts:
entities, value objects, the unit of work and the message bus.
"""
