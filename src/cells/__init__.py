"""
Cells Module
----------
Small-group ("cell") helpers. Stores the resolved address and map position of a cell
and the attendance of its members at each meeting.
"""
