"""
The CONTROLLER layer owns the live state and its transitions.
It knows Qt signals but no widgets.
"""
