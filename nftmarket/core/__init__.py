"""
Core data model, errors and primitives shared by every marketplace component.
"""
