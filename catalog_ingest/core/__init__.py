"""
Core domain: models, errors, status rules, validators and transformations.
"""
