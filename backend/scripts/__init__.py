"""
Operator scripts for hierarchy maintenance
"""
